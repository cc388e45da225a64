"""
Exceptions raised by the codec, the transaction model and the signing and
recovery engines. The command line front end turns any ``TxUtilError`` into
a non-zero exit status.
"""


class TxUtilError(Exception):
    """Base class for every error raised by this package."""


class DecodingError(TxUtilError):
    """RLP bytes could not be decoded."""


class EmptyInput(DecodingError):
    """Decoding was attempted on a zero-length buffer."""


class TruncatedInput(DecodingError):
    """A declared length runs past the end of the available bytes."""

    def __init__(self, needed: int, available: int):
        super().__init__(f'input truncated: value ends at byte {needed} but only {available} bytes are available')
        self.needed = needed
        self.available = available


class NonCanonicalEncoding(DecodingError):
    """Strict decoding found a redundant (non-minimal) encoding."""


class MalformedEnvelope(TxUtilError):
    """A decoded value does not have the shape a transaction or authorization requires."""


class KeyLengthMismatch(TxUtilError):
    """A private key is not exactly 32 bytes long."""

    def __init__(self, length: int):
        super().__init__(f'private key must be 32 bytes, got {length}')
        self.length = length


class AuthorizerCountMismatch(TxUtilError):
    """The number of authorizer keys differs from the number of unsigned authorizations."""

    def __init__(self, expected: int, supplied: int):
        super().__init__(f'{expected} unsigned authorizations but {supplied} authorizer keys supplied')
        self.expected = expected
        self.supplied = supplied


class InvalidRecoveryParameters(TxUtilError):
    """``(r, s, recovery_id)`` do not recover to a point on the curve."""


class NotationError(TxUtilError):
    """Bracket-and-hex notation could not be parsed."""


class TransactionFormatError(TxUtilError):
    """JSON input does not describe a valid transaction."""


class InvalidHex(TxUtilError):
    """Text is not a valid hex string."""
