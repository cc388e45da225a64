import json

import pytest

from errors import TransactionFormatError
from model import DynamicFeeTx, SetCodeTx, Signature
from schema import dump_transaction, parse_transaction

from conftest import SIGNATURE_R, SIGNATURE_S


def edited(transaction_json, name: str, **changes) -> str:
    document = json.loads(transaction_json(name))
    for key, value in changes.items():
        if value is None:
            document.pop(key, None)
        else:
            document[key] = value
    return json.dumps(document)


def test_parse_dynamic_fee_tx(transaction):
    tx = transaction("eip1559_unsigned")
    assert isinstance(tx, DynamicFeeTx)
    assert tx.signature is None
    params = tx.tx_params
    assert (params.chain_id, params.nonce, params.gas) == (1, 10, 63221)
    assert (params.gas_tip, params.gas_fee) == (373223425, 34714654540)
    assert params.to == bytes.fromhex("695461ef560fa4d3a3e7332c9bfcec261c11a1b6")
    assert tx.acc_list[0].storage_keys == [(3).to_bytes(32, "big")]


def test_parse_hex_quantities(transaction):
    tx = transaction("eip1559_hex_vals")
    assert tx.tx_params.chain_id == 0x301824
    assert tx.tx_params.gas == 100000
    assert tx.signature == Signature(y_parity=True, r=SIGNATURE_R, s=SIGNATURE_S)


def test_parse_set_code_tx(transaction):
    tx = transaction("eip7702_unsigned")
    assert isinstance(tx, SetCodeTx)
    assert [auth.nonce for auth in tx.set_code_auth_list] == [2, None]
    assert all(auth.signature is None for auth in tx.set_code_auth_list)

    signed = transaction("eip7702_signed")
    assert signed.set_code_auth_list[0].signature == Signature(y_parity=True, r=SIGNATURE_R, s=SIGNATURE_S)


def test_requested_type_must_match(transaction_json):
    assert isinstance(parse_transaction(transaction_json("eip1559_signed"), 2), DynamicFeeTx)
    with pytest.raises(TransactionFormatError):
        parse_transaction(transaction_json("eip1559_signed"), 4)


def test_type_can_come_from_the_caller(transaction_json):
    text = edited(transaction_json, "eip7702_empty_auth", type=None)
    assert isinstance(parse_transaction(text, 4), SetCodeTx)
    with pytest.raises(TransactionFormatError):
        parse_transaction(text)


def test_set_code_tx_without_authorization_list(transaction_json):
    tx = parse_transaction(edited(transaction_json, "eip7702_empty_auth", authorizationList=None))
    assert tx.set_code_auth_list == []


@pytest.mark.parametrize(
    "name, changes",
    [
        ("eip1559_signed", {"type": 3}),
        ("eip1559_signed", {"r": None}),
        ("eip1559_signed", {"nonce": -1}),
        ("eip1559_signed", {"nonce": True}),
        ("eip1559_signed", {"chainId": "12"}),
        ("eip1559_signed", {"destination": "0x695461ef"}),
        ("eip1559_signed", {"data": "a9059cbb"}),
        ("eip1559_signed", {"gasPrice": 1}),
        ("eip1559_signed", {"authorizationList": []}),
        ("eip1559_unsigned", {"accessList": [{"address": "0x" + "11" * 20, "storageKeys": ["0x03"]}]}),
        ("eip7702_unsigned", {"authorizationList": [{"chainId": 1, "address": "0x" + "11" * 20, "yParity": False}]}),
        ("eip7702_unsigned", {"gasLimit": None}),
    ],
)
def test_invalid_transactions(transaction_json, name: str, changes: dict):
    with pytest.raises(TransactionFormatError):
        parse_transaction(edited(transaction_json, name, **changes))


def test_not_json():
    with pytest.raises(TransactionFormatError):
        parse_transaction("[ 0x01 ]")


def test_dump_matches_source_document(transaction_json, transaction):
    dumped = json.loads(dump_transaction(transaction("eip7702_signed")))
    assert dumped == json.loads(transaction_json("eip7702_signed"))


@pytest.mark.parametrize("name", ["eip1559_unsigned", "eip1559_hex_vals", "eip7702_unsigned", "eip7702_empty_auth"])
def test_dump_parses_back(transaction, name: str):
    tx = transaction(name)
    assert parse_transaction(dump_transaction(tx)) == tx


def test_dump_writes_null_nonce(transaction):
    dumped = json.loads(dump_transaction(transaction("eip7702_unsigned")))
    assert [auth["nonce"] for auth in dumped["authorizationList"]] == [2, None]
    assert "yParity" not in dumped
    assert "authorizationList" not in json.loads(dump_transaction(transaction("eip1559_unsigned")))
