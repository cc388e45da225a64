import json

import pytest
from eth_account import Account

from errors import InvalidHex, KeyLengthMismatch
from keys import Keys, private_key_bytes, to_recovery_id, to_y_parity

from conftest import SIGNER


def test_address(signer_key: bytes):
    keys = Keys(signer_key)
    expected = Account.from_key(signer_key).address
    assert keys.address == expected
    assert keys.address_bytes == bytes.fromhex(expected[2:])
    assert SIGNER not in repr(keys)


@pytest.mark.parametrize("length", [0, 31, 33, 64])
def test_key_length(length: int):
    with pytest.raises(KeyLengthMismatch) as excinfo:
        Keys(b"\x01" * length)
    assert excinfo.value.length == length
    with pytest.raises(KeyLengthMismatch):
        private_key_bytes(b"\x01" * length)


def test_from_hex(signer_key: bytes):
    assert private_key_bytes(Keys.from_hex(SIGNER)) == signer_key
    assert private_key_bytes(Keys.from_hex("0x" + SIGNER + "\n")) == signer_key
    with pytest.raises(InvalidHex):
        Keys.from_hex("0x" + "zz" * 32)


def test_clear_on_exit(signer_key: bytes):
    with Keys(signer_key) as keys:
        assert private_key_bytes(keys) == signer_key
    assert private_key_bytes(keys) == bytes(32)


def test_from_geth_file(tmp_path, signer_key: bytes):
    keystore = Account.encrypt(signer_key, "secret", kdf="pbkdf2", iterations=2)
    key_file = tmp_path / "UTC--keystore.json"
    key_file.write_text(json.dumps(keystore))
    assert private_key_bytes(Keys.from_geth_file(str(key_file), "secret")) == signer_key
    with pytest.raises(ValueError):
        Keys.from_geth_file(str(key_file), "wrong")


@pytest.mark.parametrize(
    "v_raw, y_parity",
    [(0, False), (1, True), (27, False), (28, True)],
)
def test_to_y_parity(v_raw: int, y_parity: bool):
    assert to_y_parity(v_raw) is y_parity
    assert to_recovery_id(y_parity) == v_raw % 27
