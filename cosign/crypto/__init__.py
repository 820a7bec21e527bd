"""Cryptographic utilities for cosign."""

from ..crypto.keys import PrivateKey, PublicKey
from ..crypto.hd import HDNode
from ..crypto.signature import (
    hash_message,
    sign_hash,
    recover_public_key,
    verify_hash,
)
from ..crypto.proof import (
    encode_proposal_payload,
    get_join_hash,
    get_proposal_hash,
    derive_proof_key,
    verify_join_signature,
    verify_xpub_proof,
    verify_proposal_signature,
)

__all__ = [
    # Keys
    "PrivateKey",
    "PublicKey",
    "HDNode",

    # Signatures
    "hash_message",
    "sign_hash",
    "recover_public_key",
    "verify_hash",

    # Join and proposal proofs
    "encode_proposal_payload",
    "get_join_hash",
    "get_proposal_hash",
    "derive_proof_key",
    "verify_join_signature",
    "verify_xpub_proof",
    "verify_proposal_signature",
]
