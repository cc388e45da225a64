"""
Signing of typed transactions and EIP-7702 authorizations.

Every signature is produced the same way: RLP-encode the unsigned fields, prefix
the type byte (or the authorization magic), Keccak-256 the result and sign the
digest directly with secp256k1.
"""
import logging
from typing import Sequence, Union

from eth_account import Account
from eth_typing import Hash32

from codec import RlpItem
from errors import AuthorizerCountMismatch, MalformedEnvelope
from keys import Keys, private_key_bytes, to_y_parity
from model import SetCodeAuthorization, SetCodeTx, Signature, TypedTx, signing_hash

logger = logging.getLogger(__name__)

PrivateKey = Union[Keys, bytes]


def sign_hash(hashed: Hash32, private_key: PrivateKey) -> Signature:
    """
    Signs a 32-byte digest as is, without hashing it again.

    Args:
        hashed (Hash32): The digest to sign.
        private_key (PrivateKey): A `Keys` object or 32 raw private key bytes.

    Returns:
        Signature: The ``(y_parity, r, s)`` triple.
    """
    # unsafe_sign_hash signs the digest directly; no EIP-191 prefix is applied
    signed = Account.unsafe_sign_hash(hashed, private_key_bytes(private_key))
    return Signature(y_parity=to_y_parity(signed.v), r=signed.r, s=signed.s)


def sign_payload(type_byte: int, item: RlpItem, private_key: PrivateKey) -> list:
    """
    Signs a generic unsigned payload and returns it with ``y_parity, r, s`` appended.

    Args:
        type_byte (int): The transaction type, or the authorization magic, prefixed before hashing.
        item (RlpItem): The decoded unsigned payload; must be a list.
        private_key (PrivateKey): The signing key.
    """
    if not isinstance(item, list):
        raise MalformedEnvelope('only a list payload can be signed')
    hashed = signing_hash(type_byte, item)
    logger.debug('signing payload of type 0x%02x with hash %s', type_byte, hashed.hex())
    return item + sign_hash(hashed, private_key).to_rlp()


def sign_authorization(auth: SetCodeAuthorization, private_key: PrivateKey) -> SetCodeAuthorization:
    """
    Signs a single EIP-7702 authorization over ``keccak256(0x05 || rlp([chain_id, addr, nonce_wrapper]))``.

    Args:
        auth (SetCodeAuthorization): The authorization to sign; an existing signature is replaced.
        private_key (PrivateKey): The authority's key.

    Returns:
        SetCodeAuthorization: A signed copy of ``auth``.
    """
    return auth.with_signature(sign_hash(auth.hash(), private_key))


def sign_authorizations(auths: Sequence[SetCodeAuthorization],
                        private_keys: Sequence[PrivateKey]) -> list:
    """
    Signs every unsigned authorization of a list, leaving already signed entries untouched.

    Keys are matched by position among the unsigned entries: the first key signs the first
    unsigned authorization, and so on.

    Raises:
        AuthorizerCountMismatch: If the number of keys differs from the number of unsigned
            authorizations. Nothing is signed in that case.
    """
    unsigned = [index for index, auth in enumerate(auths) if auth.signature is None]
    if len(unsigned) != len(private_keys):
        raise AuthorizerCountMismatch(expected=len(unsigned), supplied=len(private_keys))

    signed = list(auths)
    for index, key in zip(unsigned, private_keys):
        signed[index] = sign_authorization(auths[index], key)
    logger.debug('signed %d of %d authorizations', len(unsigned), len(auths))
    return signed


def sign_transaction(tx: TypedTx, private_key: PrivateKey,
                     authorizer_keys: Sequence[PrivateKey] = ()) -> TypedTx:
    """
    Signs a typed transaction.

    For a `SetCodeTx` the unsigned authorizations are signed first with ``authorizer_keys``,
    so the transaction signature covers the signed authorization list. Any signature already
    present on the transaction itself is discarded.

    Args:
        tx (TypedTx): The transaction to sign.
        private_key (PrivateKey): The sender's key.
        authorizer_keys (Sequence[PrivateKey]): One key per unsigned authorization, in order.

    Returns:
        TypedTx: A signed copy of ``tx``.
    """
    # reject a bad sender key before any authorization gets signed
    private_key_bytes(private_key)
    if isinstance(tx, SetCodeTx):
        tx = SetCodeTx(tx_params=tx.tx_params, acc_list=tx.acc_list,
                       set_code_auth_list=sign_authorizations(tx.set_code_auth_list, authorizer_keys))
    elif authorizer_keys:
        raise AuthorizerCountMismatch(expected=0, supplied=len(authorizer_keys))

    tx = tx.with_signature(None)
    hashed = tx.hash()
    logger.debug('signing type 0x%02x transaction with hash %s', tx.tx_type, hashed.hex())
    return tx.with_signature(sign_hash(hashed, private_key))
