import dataclasses
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import ClassVar, Optional, Tuple, Union

from eth_hash.auto import keccak
from eth_typing import Address, Hash32

import codec
from codec import RlpItem
from errors import EmptyInput, MalformedEnvelope

DYNAMIC_FEE_TX_TYPE = 0x02  # EIP-1559
SET_CODE_TX_TYPE = 0x04  # EIP-7702
SET_CODE_AUTH_MAGIC = 0x05  # prefix of the EIP-7702 authorization signing payload

ZERO_ADDRESS = Address(bytes(20))


def signing_hash(type_byte: int, item: RlpItem) -> Hash32:
    """
    Computes the hash that gets signed for a typed payload.

    Args:
        type_byte (int): The transaction type (or authorization magic) prepended to the encoding.
        item (RlpItem): The unsigned payload, without any signature fields.

    Returns:
        Hash32: ``keccak256(type_byte || rlp(item))``.
    """
    return Hash32(keccak(bytes([type_byte]) + codec.encode(item)))


def split_signature(item: RlpItem) -> Tuple[list, list]:
    """
    Splits a signed payload into its unsigned part and the trailing ``[y_parity, r, s]``.

    Only the list shape is checked; the fields themselves are not interpreted.
    """
    if not isinstance(item, list) or len(item) < 3:
        raise MalformedEnvelope('a signed payload must be a list ending with y_parity, r and s')
    return item[:-3], item[-3:]


def _expect_bytes(items: list, what: str) -> list:
    if any(not isinstance(item, bytes) for item in items):
        raise MalformedEnvelope(f'{what} must be byte strings')
    return items


def _expect_list(item: RlpItem, what: str) -> list:
    if not isinstance(item, list):
        raise MalformedEnvelope(f'{what} must be a list')
    return item


@dataclass(frozen=True)
class Signature:
    """
    An ECDSA signature in the ``(y_parity, r, s)`` form used by typed transactions.

    Attributes:
        y_parity (bool): Parity of the y-coordinate of the signing point (the recovery id's low bit).
        r (int): The 'r' scalar of the signature.
        s (int): The 's' scalar of the signature.
    """
    y_parity: bool
    r: int
    s: int

    def to_rlp(self) -> list:
        """
        Encodes the signature into the three trailing RLP fields of a signed payload.

        ``y_parity`` uses the RLP boolean convention (empty string / ``0x01``), not a 0/1 integer.
        """
        return [codec.encode_bool(self.y_parity), codec.encode_int(self.r), codec.encode_int(self.s)]

    @classmethod
    def from_rlp(cls, items: list) -> 'Signature':
        """
        Reads the trailing ``y_parity, r, s`` fields of a signed payload.

        Args:
            items (list): The three signature fields as decoded RLP byte strings.

        Returns:
            Signature: The decoded triple.
        """
        y_parity, r, s = _expect_bytes(items, 'signature fields')
        return cls(codec.decode_bool(y_parity), codec.decode_int(r), codec.decode_int(s))


class BaseTxParams:
    """
    Represents the base parameters for an Ethereum transaction, compatible with
    EIP-1559 (London upgrade) transaction types which include gas tip and fee caps.
    """

    def __init__(self, chain_id: int, nonce: int, gas: int, gas_tip_cap: int, gas_fee_cap: int,
                 to: Address = ZERO_ADDRESS, value: int = 0, data: bytes = b''):
        """
        Initializes the base transaction parameters.

        Args:
            chain_id (int): The EIP-155 chain ID of the network (e.g., 1 for Mainnet, 1337 for local dev).
            nonce (int): The transaction count of the sender.
            gas (int): The gas limit of the transaction.
            gas_tip_cap (int): The maximum priority fee per gas (maxPriorityFeePerGas).
            gas_fee_cap (int): The maximum total fee per gas (maxFeePerGas).
            to (Address): The 20-byte destination address. Defaults to the zero address.
            value (int): The amount of wei sent with the transaction. Defaults to 0.
            data (bytes): The call data of the transaction. Defaults to empty bytes.
        """
        self.chain_id = chain_id
        self.nonce = nonce
        self.gas = gas
        self.gas_tip = gas_tip_cap
        self.gas_fee = gas_fee_cap
        self.to = to
        self.value = value
        self.data = data

    def __eq__(self, other):
        if not isinstance(other, BaseTxParams):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self):
        fields_repr = ', '.join(f'{name}={value!r}' for name, value in vars(self).items())
        return f'BaseTxParams({fields_repr})'

    def to_rlp(self) -> list:
        """
        Encodes the parameters in transaction field order.

        Integers are minimal big-endian (zero is the empty string); ``to`` is kept at its full 20 bytes.

        Returns:
            list: ``[chain_id, nonce, gas_tip_cap, gas_fee_cap, gas, to, value, data]``.
        """
        return [codec.encode_int(self.chain_id), codec.encode_int(self.nonce), codec.encode_int(self.gas_tip),
                codec.encode_int(self.gas_fee), codec.encode_int(self.gas), bytes(self.to),
                codec.encode_int(self.value), bytes(self.data)]

    @classmethod
    def from_rlp(cls, items: list) -> 'BaseTxParams':
        chain_id, nonce, gas_tip, gas_fee, gas, to, value, data = _expect_bytes(items, 'transaction parameters')
        return cls(chain_id=codec.decode_int(chain_id), nonce=codec.decode_int(nonce), gas=codec.decode_int(gas),
                   gas_tip_cap=codec.decode_int(gas_tip), gas_fee_cap=codec.decode_int(gas_fee),
                   to=Address(to), value=codec.decode_int(value), data=data)


@dataclass(frozen=True)
class AccessTuple:
    """
    Represents an access tuple as defined in EIP-2930 and used in EIP-1559: an address
    plus the storage keys of that account the transaction intends to touch.

    Attributes:
        addr (Address): The 20-byte address of the account being accessed.
        storage_keys (list[Hash32]): 32-byte storage keys within that account.
    """
    addr: Address
    storage_keys: list = field(default_factory=list)

    def to_rlp(self) -> list:
        """
        Encodes the access tuple into a list suitable for RLP encoding.

        Returns:
            list: ``[addr, [storage_key, ...]]``.
        """
        return [bytes(self.addr), [bytes(key) for key in self.storage_keys]]

    @classmethod
    def from_rlp(cls, item: RlpItem) -> 'AccessTuple':
        items = _expect_list(item, 'access tuple')
        if len(items) != 2:
            raise MalformedEnvelope(f'access tuple has 2 fields, got {len(items)}')
        addr, storage_keys = items
        _expect_bytes([addr], 'access tuple address')
        keys = _expect_bytes(_expect_list(storage_keys, 'storage keys'), 'storage keys')
        return cls(Address(addr), [Hash32(key) for key in keys])


@dataclass(frozen=True)
class SetCodeAuthorization:
    """
    An EIP-7702 authorization: a standalone statement, signed by the authority, delegating
    the authority's code to ``addr``.

    Attributes:
        chain_id (int): The chain ID the authorization is valid on.
        addr (Address): The 20-byte address the code is delegated to.
        nonce (Optional[int]): The authority nonce. ``None`` encodes as an empty list
            (no nonce constraint), a value ``n`` as the singleton list ``[n]``.
        signature (Optional[Signature]): The authority's signature, if already signed.
    """
    chain_id: int
    addr: Address
    nonce: Optional[int] = None
    signature: Optional[Signature] = None

    def unsigned_rlp(self) -> list:
        """
        Returns the authorization fields covered by the authority's signature.

        Returns:
            list: ``[chain_id, addr, nonce_wrapper]``.
        """
        nonce = [] if self.nonce is None else [codec.encode_int(self.nonce)]
        return [codec.encode_int(self.chain_id), bytes(self.addr), nonce]

    def to_rlp(self) -> list:
        """
        Encodes the authorization into a list suitable for RLP encoding within a transaction.

        Returns:
            list: ``[chain_id, addr, nonce_wrapper]`` followed by ``y_parity, r, s`` when signed.
        """
        items = self.unsigned_rlp()
        if self.signature is not None:
            items += self.signature.to_rlp()
        return items

    def encode(self) -> bytes:
        """
        Returns:
            bytes: The RLP encoding of the authorization, signature included when present.
        """
        return codec.encode(self.to_rlp())

    def hash(self) -> Hash32:
        """
        Calculates the hash the authority signs: the unsigned fields RLP-encoded and
        prefixed with the ``0x05`` magic byte.
        """
        return signing_hash(SET_CODE_AUTH_MAGIC, self.unsigned_rlp())

    def with_signature(self, signature: Optional[Signature]) -> 'SetCodeAuthorization':
        """
        Returns a copy of the authorization carrying ``signature``.

        Args:
            signature (Optional[Signature]): The new signature, or ``None`` to strip it.
        """
        return dataclasses.replace(self, signature=signature)

    @classmethod
    def from_rlp(cls, item: RlpItem) -> 'SetCodeAuthorization':
        items = _expect_list(item, 'authorization')
        if len(items) not in (3, 6):
            raise MalformedEnvelope(f'authorization has 3 or 6 fields, got {len(items)}')
        chain_id, addr, nonce = items[:3]
        _expect_bytes([chain_id, addr], 'authorization chain id and address')
        nonce = _expect_bytes(_expect_list(nonce, 'authorization nonce'), 'authorization nonce')
        if len(nonce) > 1:
            raise MalformedEnvelope(f'authorization nonce holds at most one value, got {len(nonce)}')
        return cls(chain_id=codec.decode_int(chain_id), addr=Address(addr),
                   nonce=codec.decode_int(nonce[0]) if nonce else None,
                   signature=Signature.from_rlp(items[3:]) if len(items) == 6 else None)


@dataclass(frozen=True, kw_only=True)
class TypedTx(ABC):
    """
    Common behaviour of EIP-2718 typed transactions: ``tx_type || rlp([fields..., y_parity, r, s])``.

    Attributes:
        tx_params (BaseTxParams): The base transaction parameters.
        acc_list (list[AccessTuple]): The access list of the transaction.
        signature (Optional[Signature]): The sender's signature, if already signed.
    """
    tx_type: ClassVar[int]
    unsigned_length: ClassVar[int]

    tx_params: BaseTxParams
    acc_list: list = field(default_factory=list)
    signature: Optional[Signature] = None

    def unsigned_rlp(self) -> list:
        """
        Returns the transaction fields covered by the sender's signature.
        """
        return self.tx_params.to_rlp() + [[entry.to_rlp() for entry in self.acc_list]]

    def to_rlp(self) -> list:
        items = self.unsigned_rlp()
        if self.signature is not None:
            items += self.signature.to_rlp()
        return items

    def hash(self) -> Hash32:
        """
        Calculates the cryptographic hash of the transaction for signing.
        The hash is computed over the RLP-encoded unsigned fields, prefixed with the transaction type.

        Returns:
            Hash32: The Keccak-256 signing hash.
        """
        return signing_hash(self.tx_type, self.unsigned_rlp())

    def encode(self) -> bytes:
        """
        Encodes the transaction into its raw typed envelope, including the signature if present.

        Returns:
            bytes: ``tx_type || rlp(fields)``.
        """
        return bytes([self.tx_type]) + codec.encode(self.to_rlp())

    def with_signature(self, signature: Optional[Signature]) -> 'TypedTx':
        """Returns a copy of the transaction carrying ``signature``."""
        return dataclasses.replace(self, signature=signature)

    @classmethod
    def from_rlp(cls, item: RlpItem) -> 'TypedTx':
        """
        Rebuilds a transaction from its decoded RLP list.

        A list of exactly the unsigned field count is an unsigned transaction; three more
        fields are read as the signature triple.

        Raises:
            MalformedEnvelope: If the list does not have one of those two shapes.
        """
        items = _expect_list(item, 'transaction payload')
        if len(items) == cls.unsigned_length:
            payload, signature = items, None
        elif len(items) == cls.unsigned_length + 3:
            payload, signature = items[:-3], Signature.from_rlp(items[-3:])
        else:
            raise MalformedEnvelope(f'type 0x{cls.tx_type:02x} transaction has {cls.unsigned_length} or '
                                    f'{cls.unsigned_length + 3} fields, got {len(items)}')
        return cls._from_payload(payload, signature)

    @classmethod
    @abstractmethod
    def _from_payload(cls, payload: list, signature: Optional[Signature]) -> 'TypedTx':
        """Builds the transaction from its unsigned fields and optional signature."""


def _access_list_from_rlp(item: RlpItem) -> list:
    return [AccessTuple.from_rlp(entry) for entry in _expect_list(item, 'access list')]


@dataclass(frozen=True, kw_only=True)
class DynamicFeeTx(TypedTx):
    """
    Represents an Ethereum EIP-1559 "dynamic fee" transaction (type 2).
    """
    tx_type: ClassVar[int] = DYNAMIC_FEE_TX_TYPE
    unsigned_length: ClassVar[int] = 9

    @classmethod
    def _from_payload(cls, payload: list, signature: Optional[Signature]) -> 'DynamicFeeTx':
        return cls(tx_params=BaseTxParams.from_rlp(payload[:8]), acc_list=_access_list_from_rlp(payload[8]),
                   signature=signature)


@dataclass(frozen=True, kw_only=True)
class SetCodeTx(TypedTx):
    """
    Represents an EIP-7702 "set code" transaction (type 4). On top of the EIP-1559 fields it
    carries a list of `SetCodeAuthorization` objects, each signed independently of the transaction.

    Attributes:
        set_code_auth_list (list[SetCodeAuthorization]): The authorization list.
    """
    tx_type: ClassVar[int] = SET_CODE_TX_TYPE
    unsigned_length: ClassVar[int] = 10

    set_code_auth_list: list = field(default_factory=list)

    def unsigned_rlp(self) -> list:
        return super().unsigned_rlp() + [[auth.to_rlp() for auth in self.set_code_auth_list]]

    @classmethod
    def _from_payload(cls, payload: list, signature: Optional[Signature]) -> 'SetCodeTx':
        auths = [SetCodeAuthorization.from_rlp(auth) for auth in _expect_list(payload[9], 'authorization list')]
        return cls(tx_params=BaseTxParams.from_rlp(payload[:8]), acc_list=_access_list_from_rlp(payload[8]),
                   set_code_auth_list=auths, signature=signature)


Transaction = Union[DynamicFeeTx, SetCodeTx]

TX_TYPES = {tx_class.tx_type: tx_class for tx_class in (DynamicFeeTx, SetCodeTx)}


def decode_envelope(data: bytes, strict: bool = False) -> Tuple[int, RlpItem]:
    """
    Splits a typed transaction envelope into its type byte and decoded RLP payload.

    The payload is returned as a plain RLP value; nothing about its fields is validated.
    """
    if not data:
        raise EmptyInput('empty transaction envelope')
    if data[0] > 0x7F:
        raise MalformedEnvelope(f'0x{data[0]:02x} is not an EIP-2718 transaction type')
    return data[0], codec.decode(data[1:], strict=strict)


def decode_transaction(data: bytes, strict: bool = False) -> Transaction:
    """Decodes a typed envelope of a supported type into its transaction object."""
    tx_type, item = decode_envelope(data, strict=strict)
    if tx_type not in TX_TYPES:
        raise MalformedEnvelope(f'unsupported transaction type 0x{tx_type:02x}')
    return TX_TYPES[tx_type].from_rlp(item)
