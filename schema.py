"""
JSON form of transactions, as read by ``encode-tx`` and written by ``decode-tx --json``.

Field names are camelCase (``chainId``, ``maxPriorityFeePerGas``, ``accessList`` ...).
Quantities are JSON integers or ``0x``-prefixed hex strings; byte fields are ``0x``-prefixed
hex strings. The signature fields ``yParity``, ``r`` and ``s`` sit flat next to the fields
they sign and are either all present or all absent.
"""
import json
from typing import Annotated, Any, List, Optional

from eth_typing import Address, Hash32
from eth_utils import decode_hex, is_0x_prefixed, is_hexstr
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer, ValidationError, \
    model_validator
from pydantic.alias_generators import to_camel
from web3 import Web3

from errors import TransactionFormatError
from model import TX_TYPES, AccessTuple, BaseTxParams, DynamicFeeTx, SetCodeAuthorization, SetCodeTx, Signature, \
    Transaction
from utils import to_hex


def _parse_quantity(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and is_0x_prefixed(value) and is_hexstr(value):
        return int(value[2:] or '0', 16)
    raise ValueError('expected an integer or a 0x-prefixed hex string')


def _hex_bytes(length: Optional[int] = None):
    def parse(value: Any) -> bytes:
        if isinstance(value, str):
            if not is_0x_prefixed(value):
                raise ValueError('expected a 0x-prefixed hex string')
            value = decode_hex(value)
        if not isinstance(value, bytes):
            raise ValueError('expected a 0x-prefixed hex string')
        if length is not None and len(value) != length:
            raise ValueError(f'expected {length} bytes, got {len(value)}')
        return value

    return parse


Quantity = Annotated[int, BeforeValidator(_parse_quantity), Field(ge=0)]
# r and s are written back zero-padded to 32 bytes
Scalar = Annotated[int, BeforeValidator(_parse_quantity), Field(ge=0), PlainSerializer(lambda v: f'0x{v:064x}')]
HexBytes = Annotated[bytes, BeforeValidator(_hex_bytes()), PlainSerializer(to_hex)]
AddressBytes = Annotated[bytes, BeforeValidator(_hex_bytes(20)), PlainSerializer(Web3.to_checksum_address)]
StorageKey = Annotated[bytes, BeforeValidator(_hex_bytes(32)), PlainSerializer(to_hex)]


class CamelModel(BaseModel):
    """Base model mapping snake_case attributes onto camelCase JSON keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='forbid',
    )


class SignedModel(CamelModel):
    """Flattened ``yParity``/``r``/``s`` triple shared by transactions and authorizations."""

    y_parity: Optional[bool] = None
    r: Optional[Scalar] = None
    s: Optional[Scalar] = None

    @model_validator(mode='after')
    def check_signature_complete(self):
        given = [value is not None for value in (self.y_parity, self.r, self.s)]
        if any(given) and not all(given):
            raise ValueError('yParity, r and s must be given together')
        return self

    def signature(self) -> Optional[Signature]:
        if self.r is None:
            return None
        return Signature(y_parity=self.y_parity, r=self.r, s=self.s)


def _signature_fields(signature: Optional[Signature]) -> dict:
    if signature is None:
        return {}
    return {'y_parity': signature.y_parity, 'r': signature.r, 's': signature.s}


class AccessListEntry(CamelModel):
    address: AddressBytes
    storage_keys: List[StorageKey] = []

    def to_access_tuple(self) -> AccessTuple:
        return AccessTuple(Address(self.address), [Hash32(key) for key in self.storage_keys])

    @classmethod
    def from_access_tuple(cls, entry: AccessTuple) -> 'AccessListEntry':
        return cls(address=bytes(entry.addr), storage_keys=[bytes(key) for key in entry.storage_keys])


class AuthorizationEntry(SignedModel):
    chain_id: Quantity
    address: AddressBytes
    nonce: Optional[Quantity] = None

    def to_authorization(self) -> SetCodeAuthorization:
        return SetCodeAuthorization(chain_id=self.chain_id, addr=Address(self.address), nonce=self.nonce,
                                    signature=self.signature())

    @classmethod
    def from_authorization(cls, auth: SetCodeAuthorization) -> 'AuthorizationEntry':
        # nonce is always set so that a null nonce is written out explicitly
        return cls(chain_id=auth.chain_id, address=bytes(auth.addr), nonce=auth.nonce,
                   **_signature_fields(auth.signature))


class TransactionModel(SignedModel):
    """
    JSON representation of an EIP-1559 or EIP-7702 transaction.

    ``type`` is optional when the caller supplies the transaction type separately;
    ``authorizationList`` is only allowed on EIP-7702 transactions.
    """

    tx_type: Optional[int] = Field(None, alias='type')
    chain_id: Quantity
    nonce: Quantity
    max_priority_fee_per_gas: Quantity
    max_fee_per_gas: Quantity
    gas_limit: Quantity
    destination: AddressBytes
    amount: Quantity = 0
    data: HexBytes = b''
    access_list: List[AccessListEntry] = []
    authorization_list: Optional[List[AuthorizationEntry]] = None

    def to_transaction(self, tx_type: Optional[int] = None) -> Transaction:
        """
        Builds the transaction object.

        Args:
            tx_type (Optional[int]): The requested transaction type. Must agree with the
                ``type`` field when both are given.

        Raises:
            TransactionFormatError: If the type is missing, unsupported or contradictory.
        """
        if tx_type is not None and self.tx_type is not None and tx_type != self.tx_type:
            raise TransactionFormatError(f'requested type 0x{tx_type:02x} but the transaction declares '
                                         f'type 0x{self.tx_type:02x}')
        if tx_type is None:
            tx_type = self.tx_type
        if tx_type is None:
            raise TransactionFormatError('transaction type is not given')
        if tx_type not in TX_TYPES:
            raise TransactionFormatError(f'unsupported transaction type 0x{tx_type:02x}')

        tx_params = BaseTxParams(chain_id=self.chain_id, nonce=self.nonce, gas=self.gas_limit,
                                 gas_tip_cap=self.max_priority_fee_per_gas, gas_fee_cap=self.max_fee_per_gas,
                                 to=Address(self.destination), value=self.amount, data=self.data)
        acc_list = [entry.to_access_tuple() for entry in self.access_list]

        if TX_TYPES[tx_type] is DynamicFeeTx:
            if self.authorization_list is not None:
                raise TransactionFormatError('authorizationList is only allowed on type 0x04 transactions')
            return DynamicFeeTx(tx_params=tx_params, acc_list=acc_list, signature=self.signature())
        auths = [entry.to_authorization() for entry in self.authorization_list or []]
        return SetCodeTx(tx_params=tx_params, acc_list=acc_list, set_code_auth_list=auths,
                         signature=self.signature())

    @classmethod
    def from_transaction(cls, tx: Transaction) -> 'TransactionModel':
        params = tx.tx_params
        fields = dict(tx_type=tx.tx_type, chain_id=params.chain_id, nonce=params.nonce,
                      max_priority_fee_per_gas=params.gas_tip, max_fee_per_gas=params.gas_fee,
                      gas_limit=params.gas, destination=bytes(params.to), amount=params.value,
                      data=bytes(params.data),
                      access_list=[AccessListEntry.from_access_tuple(entry) for entry in tx.acc_list])
        if isinstance(tx, SetCodeTx):
            fields['authorization_list'] = [AuthorizationEntry.from_authorization(auth)
                                            for auth in tx.set_code_auth_list]
        fields.update(_signature_fields(tx.signature))
        return cls(**fields)


def parse_transaction(text: str, tx_type: Optional[int] = None) -> Transaction:
    """
    Parses the JSON text of a transaction.

    Args:
        text (str): The JSON document.
        tx_type (Optional[int]): The expected transaction type, if known.

    Returns:
        Transaction: A `DynamicFeeTx` or `SetCodeTx`, signed when the JSON carries a signature.

    Raises:
        TransactionFormatError: If the text is not JSON or does not describe a valid transaction.
    """
    try:
        model = TransactionModel.model_validate(json.loads(text))
    except json.JSONDecodeError as e:
        raise TransactionFormatError(f'transaction is not valid JSON: {e}') from e
    except ValidationError as e:
        raise TransactionFormatError(str(e)) from e
    return model.to_transaction(tx_type)


def dump_transaction(tx: Transaction) -> str:
    """Serializes a transaction to indented JSON in the form `parse_transaction` reads."""
    model = TransactionModel.from_transaction(tx)
    return json.dumps(model.model_dump(mode='json', by_alias=True, exclude_unset=True), indent=2)
