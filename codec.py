"""
Recursive Length Prefix (RLP) encoding and decoding.

An RLP value is either a byte string (``bytes``) or an ordered list of values
(``list``). The first octet of an encoded value tells what follows:

+-------------+-----------------------------------------------------------+
| Prefix      | Meaning                                                   |
+=============+===========================================================+
| [0x00-0x7f] | Single byte, value is the byte itself                     |
+-------------+-----------------------------------------------------------+
| [0x80-0xb7] | Short string (0-55 bytes), length = prefix - 0x80         |
+-------------+-----------------------------------------------------------+
| [0xb8-0xbf] | Long string (>55 bytes), prefix - 0xb7 = length of length |
+-------------+-----------------------------------------------------------+
| [0xc0-0xf7] | Short list (0-55 bytes payload), length = prefix - 0xc0   |
+-------------+-----------------------------------------------------------+
| [0xf8-0xff] | Long list (>55 bytes payload), prefix - 0xf7 = len of len |
+-------------+-----------------------------------------------------------+

Encoding always produces the canonical form. Decoding is lenient by default
and accepts non-minimal length forms; pass ``strict=True`` to reject them.
"""
from typing import Tuple, Union

from eth_utils import big_endian_to_int, int_to_big_endian

from errors import EmptyInput, NonCanonicalEncoding, TruncatedInput

RlpItem = Union[bytes, list]

SINGLE_BYTE_MAX = 0x7F
SHORT_STRING_PREFIX = 0x80
LONG_STRING_BASE = 0xB7
SHORT_LIST_PREFIX = 0xC0
LONG_LIST_BASE = 0xF7
SHORT_MAX_LEN = 55


def encode(item: RlpItem) -> bytes:
    """
    Encodes a value into its canonical RLP byte representation.

    Args:
        item (RlpItem): A byte string or a (nested) list of byte strings.

    Returns:
        bytes: The RLP encoding of ``item``.

    Raises:
        TypeError: If ``item`` (or any nested child) is neither bytes nor a list.
    """
    if isinstance(item, (bytes, bytearray)):
        return _encode_bytes(bytes(item))
    if isinstance(item, list):
        payload = b''.join(encode(child) for child in item)
        return _length_prefix(len(payload), SHORT_LIST_PREFIX, LONG_LIST_BASE) + payload
    raise TypeError(f'cannot RLP encode {type(item).__name__}')


def _encode_bytes(data: bytes) -> bytes:
    if len(data) == 1 and data[0] <= SINGLE_BYTE_MAX:
        return data
    return _length_prefix(len(data), SHORT_STRING_PREFIX, LONG_STRING_BASE) + data


def _length_prefix(length: int, short_base: int, long_base: int) -> bytes:
    if length <= SHORT_MAX_LEN:
        return bytes([short_base + length])
    length_bytes = encode_int(length)
    return bytes([long_base + len(length_bytes)]) + length_bytes


def decode(data: bytes, strict: bool = False) -> RlpItem:
    """
    Decodes the RLP value at the start of ``data``.

    Args:
        data (bytes): The encoded buffer.
        strict (bool): If True, reject non-canonical encodings and trailing bytes.

    Returns:
        RlpItem: The decoded byte string or list.

    Raises:
        EmptyInput: If ``data`` is empty.
        TruncatedInput: If a declared length runs past the end of the buffer.
        NonCanonicalEncoding: In strict mode, if the encoding is not canonical.
    """
    item, end = decode_item(data, 0, strict=strict)
    if strict and end != len(data):
        raise NonCanonicalEncoding(f'{len(data) - end} trailing bytes after RLP value')
    return item


def decode_item(data: bytes, offset: int = 0, strict: bool = False) -> Tuple[RlpItem, int]:
    """
    Decodes exactly one value starting at ``offset``.

    Returns:
        tuple: The decoded value and the offset just past it.
    """
    return _decode_item(data, offset, len(data), strict)


def _decode_item(data: bytes, offset: int, end: int, strict: bool) -> Tuple[RlpItem, int]:
    if offset >= end:
        raise EmptyInput('no bytes left to decode')

    prefix = data[offset]
    offset += 1

    if prefix <= SINGLE_BYTE_MAX:
        return bytes([prefix]), offset

    if prefix < SHORT_LIST_PREFIX:
        length, offset = _read_length(data, offset, end, prefix, SHORT_STRING_PREFIX, LONG_STRING_BASE, strict)
        _check_bounds(offset + length, end)
        payload = bytes(data[offset:offset + length])
        if strict and length == 1 and payload[0] <= SINGLE_BYTE_MAX:
            raise NonCanonicalEncoding('single byte below 0x80 must not carry a prefix')
        return payload, offset + length

    length, offset = _read_length(data, offset, end, prefix, SHORT_LIST_PREFIX, LONG_LIST_BASE, strict)
    list_end = offset + length
    _check_bounds(list_end, end)
    items = []
    # children are bounded by the list's own span, not by the whole buffer
    while offset < list_end:
        child, offset = _decode_item(data, offset, list_end, strict)
        items.append(child)
    return items, list_end


def _read_length(data: bytes, offset: int, end: int, prefix: int, short_base: int, long_base: int,
                 strict: bool) -> Tuple[int, int]:
    if prefix <= long_base:
        return prefix - short_base, offset

    length_of_length = prefix - long_base
    _check_bounds(offset + length_of_length, end)
    length_bytes = data[offset:offset + length_of_length]
    if strict and (length_bytes[0] == 0 or big_endian_to_int(length_bytes) <= SHORT_MAX_LEN):
        raise NonCanonicalEncoding(f'non-minimal length encoding 0x{bytes(length_bytes).hex()}')
    return big_endian_to_int(length_bytes), offset + length_of_length


def _check_bounds(needed_end: int, end: int):
    if needed_end > end:
        raise TruncatedInput(needed=needed_end, available=end)


def encode_int(value: int) -> bytes:
    """
    Converts a non-negative integer into its minimal big-endian byte string.

    Zero becomes the empty byte string, never ``b'\\x00'``.
    """
    return int_to_big_endian(value).lstrip(b'\x00')


def decode_int(data: bytes) -> int:
    """Converts a big-endian byte string back into an integer (empty is zero)."""
    return big_endian_to_int(data)


def encode_bool(flag: bool) -> bytes:
    """RLP boolean convention: empty string is False, ``0x01`` is True."""
    return b'\x01' if flag else b''


def decode_bool(data: bytes) -> bool:
    return len(data) != 0
