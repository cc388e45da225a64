"""Shared fixtures: JSON transactions and expected encodings from the reference integration tests."""
from pathlib import Path

import pytest

from schema import parse_transaction
from utils import hex_to_bytes

TESTS_DIR = Path(__file__).parent
TRANSACTIONS_DIR = TESTS_DIR / 'transactions'
GOLDEN_DIR = TESTS_DIR / 'golden'

SIGNER = '34954993d403229ee2e01cf6fa8222224935bc47f9534b0c0ea8054764375501'

SIGNATURE_R = 0x52ee022a326abb33e6bebab1fa694043371ab41a7a985ea23d48bd78502be87c
SIGNATURE_S = 0x5a0f69dc8009a1e449bfbc8b13220bc40337da1325c261afdac1803f26d0e9d5

EXPECTED = {
    'eip1559_unsigned': (
        '0x02f8a4010a84163ef00185081527974c82f6f594695461ef560fa4d3a3e7332c9bfcec261c11a1b68080f838f7948dfdf61f2eb938'
        'b207c228b01a2918b196992abfe1a0000000000000000000000000000000000000000000000000000000000000000301a0efa0ed91'
        '32e900d5dd195698e4a7c14f08dc03c2b3e62b8b9a87b7e08a57c400a00ef4dc89b0c9f4b8e2fdd377e4ed0c3c4c7813a1562c8ada05'
        'ebab04925935e7'
    ),
    'eip1559_signed': (
        '0x02f8e9018084163ef00185081527974c82f6f594695461ef560fa4d3a3e7332c9bfcec261c11a1b680b844a9059cbb00000000000'
        '00000000000005a96834046c1dff63119eb0eed6330fc5007a1d700000000000000000000000000000000000000000000000000000001'
        'a1432720f838f7948dfdf61f2eb938b207c228b01a2918b196992abfe1a000000000000000000000000000000000000000000000000000'
        '0000000000000301a052ee022a326abb33e6bebab1fa694043371ab41a7a985ea23d48bd78502be87ca05a0f69dc8009a1e449bfbc8b13'
        '220bc40337da1325c261afdac1803f26d0e9d5'
    ),
    'eip1559_hex_vals': (
        '0x02f8a8833018248084163ef00185081527974c830186a094695461ef560fa4d3a3e7332c9bfcec261c11a1b68080f838f7948dfdf6'
        '1f2eb938b207c228b01a2918b196992abfe1a0000000000000000000000000000000000000000000000000000000000000000301a052'
        'ee022a326abb33e6bebab1fa694043371ab41a7a985ea23d48bd78502be87ca05a0f69dc8009a1e449bfbc8b13220bc40337da1325c2'
        '61afdac1803f26d0e9d5'
    ),
    'eip7702_signed': (
        '0x04f90102018084163ef00185081527974c82f6f594695461ef560fa4d3a3e7332c9bfcec261c11a1b68080f838f7948dfdf61f2eb9'
        '38b207c228b01a2918b196992abfe1a00000000000000000000000000000000000000000000000000000000000000003f85cf85a0194'
        'd571b8bcd11df08f0459009dd1bd664127a431eec001a052ee022a326abb33e6bebab1fa694043371ab41a7a985ea23d48bd78502be8'
        '7ca05a0f69dc8009a1e449bfbc8b13220bc40337da1325c261afdac1803f26d0e9d501a052ee022a326abb33e6bebab1fa694043371a'
        'b41a7a985ea23d48bd78502be87ca05a0f69dc8009a1e449bfbc8b13220bc40337da1325c261afdac1803f26d0e9d5'
    ),
    'eip7702_empty_auth': (
        '0x04f86c018084163ef00185081527974c82f6f594695461ef560fa4d3a3e7332c9bfcec261c11a1b68080c0c080a08159b9bdfa2334'
        '42f45941fa56c0f95c825feadc44a2a0162962e893d93946d6a002225482ae77cccf26f2aa6264f1e34b9815be29678e920c2833f57d'
        'a2649ebd'
    ),
}


@pytest.fixture
def signer_key() -> bytes:
    return bytes.fromhex(SIGNER)


@pytest.fixture
def transaction_json():
    """Returns the JSON text of a transaction fixture by name."""

    def load(name: str) -> str:
        return (TRANSACTIONS_DIR / f'{name}.json').read_text()

    return load


@pytest.fixture
def transaction(transaction_json):
    """Returns a parsed transaction fixture by name."""

    def load(name: str):
        return parse_transaction(transaction_json(name))

    return load


@pytest.fixture
def expected_hex():
    """Returns the expected typed envelope hex for a transaction fixture."""

    def load(name: str) -> str:
        if name in EXPECTED:
            return EXPECTED[name]
        return (GOLDEN_DIR / f'{name}.hex').read_text().strip()

    return load


@pytest.fixture
def expected_bytes(expected_hex):
    def load(name: str) -> bytes:
        return hex_to_bytes(expected_hex(name))

    return load
