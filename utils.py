import logging

from eth_utils import decode_hex, encode_hex

from errors import InvalidHex

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def hex_to_bytes(text: str) -> bytes:
    """
    Decodes a hex string, with or without the '0x' prefix, into bytes.

    Surrounding whitespace (e.g. the trailing newline of stdin) is ignored.

    Raises:
        InvalidHex: If the text is not an even-length hex string.
    """
    try:
        return decode_hex(text.strip())
    except ValueError as e:
        raise InvalidHex(f'invalid hex string {text.strip()[:20]!r}: {e}') from e


def to_hex(data: bytes) -> str:
    """Lowercase hex with the '0x' prefix, the conventional presentation of every output."""
    return encode_hex(data)


def setup_logging(verbosity: int = 0):
    """
    Configures the root logger for command line use. Log records go to stderr so they
    never mix with the hex written to stdout.

    Args:
        verbosity (int): 0 for warnings only, 1 for info, 2 or more for debug.
    """
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)
    logging.basicConfig(level=level, format=LOG_FORMAT)
