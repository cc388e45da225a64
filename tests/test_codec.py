import pytest
import rlp

import codec
from errors import DecodingError, EmptyInput, NonCanonicalEncoding, TruncatedInput


@pytest.mark.parametrize(
    "item, expected",
    [
        (b"", b"\x80"),
        (b"\x00", b"\x00"),
        (b"\x7f", b"\x7f"),
        (b"\x80", b"\x81\x80"),
        (b"dog", b"\x83dog"),
        ([], b"\xc0"),
        ([b"cat", b"dog"], b"\xc8\x83cat\x83dog"),
        ([[], [[]], [[], [[]]]], bytes.fromhex("c7c0c1c0c3c0c1c0")),
    ],
)
def test_encode_known_values(item, expected: bytes):
    assert codec.encode(item) == expected


def test_encode_string_length_boundary():
    assert codec.encode(b"a" * 55) == b"\xb7" + b"a" * 55
    assert codec.encode(b"a" * 56) == b"\xb8\x38" + b"a" * 56
    assert codec.encode(b"a" * 1024) == b"\xb9\x04\x00" + b"a" * 1024


def test_encode_list_length_boundary():
    # 55 single-byte children make a 55 byte payload
    short = [b"\x01"] * 55
    assert codec.encode(short) == b"\xf7" + b"\x01" * 55
    long = [b"\x01"] * 56
    assert codec.encode(long) == b"\xf8\x38" + b"\x01" * 56


@pytest.mark.parametrize(
    "item",
    [
        b"",
        b"\x00",
        b"\x7f\x80",
        b"x" * 300,
        [b"", [b"\x01", [b"\x02" * 60]], []],
        [[b"a" * 20, [b"b" * 32] * 3]] * 4,
    ],
)
def test_encode_matches_pyrlp(item):
    assert codec.encode(item) == rlp.encode(item)


@pytest.mark.parametrize("item", [1, "dog", None, [b"ok", 2]])
def test_encode_rejects_other_types(item):
    with pytest.raises(TypeError):
        codec.encode(item)


@pytest.mark.parametrize(
    "value, expected",
    [(0, b""), (1, b"\x01"), (0x7F, b"\x7f"), (0x80, b"\x80"), (1024, b"\x04\x00"), (2**64, b"\x01" + bytes(8))],
)
def test_encode_int_is_minimal(value: int, expected: bytes):
    assert codec.encode_int(value) == expected
    assert codec.decode_int(expected) == value


def test_integer_encodings():
    assert codec.encode(codec.encode_int(0)) == b"\x80"
    assert codec.encode(codec.encode_int(15)) == b"\x0f"
    assert codec.encode(codec.encode_int(1024)) == b"\x82\x04\x00"


def test_bool_convention():
    assert codec.encode_bool(False) == b""
    assert codec.encode_bool(True) == b"\x01"
    assert codec.decode_bool(b"") is False
    assert codec.decode_bool(b"\x01") is True
    # any non-empty string reads as true
    assert codec.decode_bool(b"\x02") is True


@pytest.mark.parametrize(
    "item",
    [b"", b"\x05", b"\x80", b"z" * 56, [], [b"cat", [b"dog", []], b"x" * 70], [[b"\x01"] * 56]],
)
def test_decode_inverts_encode(item):
    assert codec.decode(codec.encode(item)) == item
    assert codec.decode(codec.encode(item), strict=True) == item


def test_decode_item_returns_next_offset():
    data = codec.encode(b"dog") + codec.encode([b"cat"])
    item, offset = codec.decode_item(data)
    assert (item, offset) == (b"dog", 4)
    item, offset = codec.decode_item(data, offset)
    assert (item, offset) == ([b"cat"], len(data))
    with pytest.raises(EmptyInput):
        codec.decode_item(data, offset)


class TestDecodeErrors:
    def test_empty_input(self):
        with pytest.raises(EmptyInput):
            codec.decode(b"")

    def test_truncated_string(self):
        with pytest.raises(TruncatedInput) as excinfo:
            codec.decode(b"\x83do")
        assert excinfo.value.needed == 4
        assert excinfo.value.available == 3

    def test_truncated_length_of_length(self):
        with pytest.raises(TruncatedInput):
            codec.decode(b"\xb8")

    def test_truncated_list(self):
        with pytest.raises(TruncatedInput):
            codec.decode(b"\xc5\x83do")

    def test_child_overrunning_its_list(self):
        # the buffer holds enough bytes, but the child runs past its parent's one byte payload
        with pytest.raises(TruncatedInput):
            codec.decode(b"\xc1\x82ab")

    def test_errors_share_a_base(self):
        assert issubclass(EmptyInput, DecodingError)
        assert issubclass(TruncatedInput, DecodingError)
        assert issubclass(NonCanonicalEncoding, DecodingError)


class TestCanonicality:
    @pytest.mark.parametrize(
        "data, expected",
        [
            (b"\x81\x05", b"\x05"),
            (b"\xb8\x01a", b"a"),
            (b"\xb9\x00\x38" + b"a" * 56, b"a" * 56),
            (b"\xf8\x01\x80", [b""]),
            (b"\x80\x00", b""),
        ],
    )
    def test_lenient_decoding_accepts(self, data: bytes, expected):
        assert codec.decode(data) == expected

    @pytest.mark.parametrize(
        "data",
        [
            b"\x81\x05",
            b"\xb8\x01a",
            b"\xb9\x00\x38" + b"a" * 56,
            b"\xf8\x01\x80",
            b"\x80\x00",
            b"\xc2\x81\x05",
        ],
    )
    def test_strict_decoding_rejects(self, data: bytes):
        with pytest.raises(NonCanonicalEncoding):
            codec.decode(data, strict=True)
