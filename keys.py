from typing import Union

from eth_account import Account

from errors import KeyLengthMismatch
from utils import hex_to_bytes

# --- Module-level Constants ---
PRIVATE_KEY_LENGTH = 32  # secp256k1 private keys are exactly 32 raw bytes.
V_OFFSET = 27  # Pre-EIP-155 'v' values are 27 or 28; typed transactions only carry the parity.


class Keys:
    """
    A container for a secp256k1 private key used to sign transactions and authorizations.

    The key is kept in a mutable buffer so it can be wiped once it is no longer needed;
    use the object as a context manager to clear it on exit.
    """

    def __init__(self, priv_key: bytes):
        """
        Initializes a Keys object from raw private key bytes.

        Args:
            priv_key (bytes): The 32-byte private key.

        Raises:
            KeyLengthMismatch: If the key is not exactly 32 bytes long.
        """
        if len(priv_key) != PRIVATE_KEY_LENGTH:
            raise KeyLengthMismatch(len(priv_key))
        self.priv_key_bytes = bytearray(priv_key)

    def __enter__(self) -> 'Keys':
        return self

    def __exit__(self, *exc_info):
        self.clear()

    def __repr__(self):
        # never show key material
        return f'Keys(address={self.address})'

    @property
    def address(self) -> str:
        """The checksummed Ethereum address controlled by this key."""
        return Account.from_key(bytes(self.priv_key_bytes)).address

    @property
    def address_bytes(self) -> bytes:
        return hex_to_bytes(self.address)

    def clear(self):
        """Overwrites the key material with zeros."""
        for i in range(len(self.priv_key_bytes)):
            self.priv_key_bytes[i] = 0

    @staticmethod
    def from_hex(priv_key: str) -> 'Keys':
        """
        Creates a Keys object from a hex-encoded private key, with or without the '0x' prefix.

        Args:
            priv_key (str): The hexadecimal private key string.

        Returns:
            Keys: The loaded keys.
        """
        return Keys(hex_to_bytes(priv_key))

    @staticmethod
    def from_geth_file(file_name: str, pswd: str = '') -> 'Keys':
        """
        Loads and decrypts the private key of a Geth-style (Web3 Secret Storage) keystore file.

        Args:
            file_name (str): The full path to the keystore file.
            pswd (str, optional): The password for the keystore file. Defaults to an empty string.

        Returns:
            Keys: A `Keys` object holding the decrypted private key.
        """
        with open(file_name) as keyfile:
            encrypted_key = keyfile.read()
        return Keys(Account.decrypt(encrypted_key, pswd))


def private_key_bytes(key: Union[Keys, bytes]) -> bytes:
    """
    Returns the raw 32 private key bytes of ``key``.

    Args:
        key (Union[Keys, bytes]): A `Keys` object or raw private key bytes.

    Raises:
        KeyLengthMismatch: If raw bytes of the wrong length are supplied.
    """
    if isinstance(key, Keys):
        return bytes(key.priv_key_bytes)
    if len(key) != PRIVATE_KEY_LENGTH:
        raise KeyLengthMismatch(len(key))
    return bytes(key)


def to_y_parity(v_raw: int) -> bool:
    """
    Converts the 'v' value returned by a signing primitive into the typed-transaction y parity.

    Signers return either the bare recovery id (0 or 1) or the legacy form (27 or 28).
    Only the low bit of the recovery id, the oddness of the y-coordinate, survives.

    Args:
        v_raw (int): The raw 'v' value.

    Returns:
        bool: True iff the recovery id is odd.
    """
    recovery_id = v_raw - V_OFFSET if v_raw >= V_OFFSET else v_raw
    return bool(recovery_id & 1)


def to_recovery_id(y_parity: bool) -> int:
    return 1 if y_parity else 0
