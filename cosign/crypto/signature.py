"""Signature utilities for cosign.

Signatures are 65-byte BIP-137 compact signatures: a header byte
(31 + recovery id, compressed P2PKH) followed by r and s.
"""

from typing import Union

from ..constants import COMPACT_HEADER_COMPRESSED, MESSAGE_MAGIC
from ..crypto.keys import PrivateKey, PublicKey
from ..exceptions import CryptoError, ValidationError
from ..types.common import Signature
from ..utils.encoding import double_sha256, encode_varint

__all__ = [
    "hash_message",
    "sign_hash",
    "recover_public_key",
    "verify_hash",
]


def hash_message(message: Union[str, bytes]) -> bytes:
    """
    Hash message with Bitcoin message signing convention.

    Args:
        message: Message bytes

    Returns:
        32-byte message hash
    """
    if isinstance(message, str):
        message = message.encode("utf-8")

    # Create full message with magic and length
    length_bytes = encode_varint(len(message))
    full_message = MESSAGE_MAGIC + length_bytes + message

    return double_sha256(full_message)


def sign_hash(message_hash: bytes, private_key: Union[PrivateKey, bytes]) -> Signature:
    """
    Sign a 32-byte digest.

    Args:
        message_hash: Digest to sign
        private_key: Signing key

    Returns:
        65-byte compact signature
    """
    if not isinstance(private_key, PrivateKey):
        private_key = PrivateKey(private_key)

    recoverable = private_key.sign_recoverable(message_hash)
    header = COMPACT_HEADER_COMPRESSED + recoverable[64]

    return Signature(bytes([header]) + recoverable[:64])


def recover_public_key(signature: bytes, message_hash: bytes) -> PublicKey:
    """
    Recover the signer's compressed public key from a compact signature.

    Raises:
        CryptoError: If the signature is malformed or recovery fails
    """
    if len(signature) != 65:
        raise CryptoError(f"Compact signature must be 65 bytes, got {len(signature)}")
    if len(message_hash) != 32:
        raise CryptoError("Message hash must be 32 bytes")

    header = signature[0]
    recid = header - COMPACT_HEADER_COMPRESSED
    if not 0 <= recid <= 3:
        raise CryptoError(f"Unsupported signature header: {header}")

    return PublicKey.from_signature_and_hash(signature[1:] + bytes([recid]), message_hash)


def verify_hash(
    signature: bytes,
    message_hash: bytes,
    public_key: Union[PublicKey, bytes]
) -> bool:
    """
    Verify a compact signature against an expected public key.

    Returns:
        True if the signature recovers to public_key
    """
    if not isinstance(public_key, PublicKey):
        try:
            public_key = PublicKey(public_key)
        except ValidationError:
            return False

    try:
        recovered = recover_public_key(signature, message_hash)
    except CryptoError:
        return False

    return recovered == public_key

