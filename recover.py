"""
Signer recovery: the inverse of ``signer``. Given a signed, encoded payload it
reproduces the signing hash and recovers the address that signed it.
"""
import logging
from typing import Tuple

from eth_hash.auto import keccak
from eth_keys import keys as eth_keys
from eth_keys.exceptions import BadSignature, ValidationError
from eth_typing import Address, Hash32

import codec
from codec import RlpItem
from errors import InvalidRecoveryParameters, MalformedEnvelope
from keys import to_recovery_id
from model import SET_CODE_AUTH_MAGIC, SetCodeAuthorization, Signature, decode_envelope, signing_hash, \
    split_signature

logger = logging.getLogger(__name__)


def public_key_to_address(public_key: bytes) -> Address:
    """
    Derives the address of a public key: the last 20 bytes of the Keccak-256 hash of the
    64-byte uncompressed point (the 65-byte form has its ``0x04`` prefix dropped first).
    """
    if len(public_key) == 65 and public_key[0] == 0x04:
        public_key = public_key[1:]
    if len(public_key) != 64:
        raise ValueError(f'expected an uncompressed public key, got {len(public_key)} bytes')
    return Address(keccak(public_key)[-20:])


def recover_public_key(hashed: Hash32, signature: Signature) -> bytes:
    """
    Recovers the 64-byte public key that produced ``signature`` over ``hashed``.

    Raises:
        InvalidRecoveryParameters: If ``(r, s, recovery_id)`` do not correspond to a valid curve point.
    """
    try:
        vrs = (to_recovery_id(signature.y_parity), signature.r, signature.s)
        public_key = eth_keys.Signature(vrs=vrs).recover_public_key_from_msg_hash(hashed)
    except (BadSignature, ValidationError) as e:
        raise InvalidRecoveryParameters(f'cannot recover a public key from the signature: {e}') from e
    return public_key.to_bytes()


def recover(type_byte: int, payload: bytes) -> Tuple[Hash32, Address]:
    """
    Recovers the signer of an RLP-encoded signed payload.

    Args:
        type_byte (int): The transaction type (or authorization magic) the payload was signed under.
        payload (bytes): The RLP encoding of the signed field list, without the type byte.

    Returns:
        tuple: The signing hash and the 20-byte address of the signer.

    Raises:
        MalformedEnvelope: If the payload is not a list of at least three values.
        InvalidRecoveryParameters: If the signature does not recover to a public key.
    """
    return _recover_item(type_byte, codec.decode(payload))


def _recover_item(type_byte: int, item: RlpItem) -> Tuple[Hash32, Address]:
    unsigned, signature_items = split_signature(item)
    signature = Signature.from_rlp(signature_items)
    hashed = signing_hash(type_byte, unsigned)
    address = public_key_to_address(recover_public_key(hashed, signature))
    logger.debug('recovered 0x%s from type 0x%02x payload with hash %s', address.hex(), type_byte, hashed.hex())
    return hashed, address


def recover_envelope(data: bytes) -> Tuple[Hash32, Address]:
    """Same as `recover`, for a complete typed envelope (``type_byte || rlp(fields)``)."""
    type_byte, item = decode_envelope(data)
    return _recover_item(type_byte, item)


def recover_authority(auth: SetCodeAuthorization) -> Address:
    """
    Recovers the authority (signer) of a signed EIP-7702 authorization.

    Raises:
        MalformedEnvelope: If the authorization is unsigned.
    """
    if auth.signature is None:
        raise MalformedEnvelope('authorization is not signed')
    _, address = recover(SET_CODE_AUTH_MAGIC, auth.encode())
    return address
