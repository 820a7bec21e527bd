"""Join and proposal hash construction.

Both hashes are Bitcoin signed-message digests over a payload whose fields
are each varint length-prefixed, and which starts with a domain tag so a
join hash can never collide with a proposal hash.

    join:     tag | walletName | name | authPubKey | xpub
    proposal: tag | walletName | u8 type | payload
"""

import json
from typing import Any, Union

from ..constants import JOIN_MESSAGE, PROOF_INDEX, PROPOSAL_MESSAGE, Network
from ..crypto.hd import HDNode
from ..crypto.keys import PrivateKey, PublicKey
from ..crypto.signature import hash_message, verify_hash
from ..exceptions import CryptoError, ValidationError
from ..utils.encoding import write_var_bytes, write_var_string

__all__ = [
    "PROOF_INDEX",
    "encode_proposal_payload",
    "get_join_hash",
    "get_proposal_hash",
    "derive_proof_node",
    "derive_proof_key",
    "verify_join_signature",
    "verify_xpub_proof",
    "verify_proposal_signature",
]


def encode_proposal_payload(payload: Any) -> str:
    """
    Encode a proposal payload as a string.

    Strings pass through unchanged; anything else is serialized as
    canonical JSON (sorted keys, no whitespace).

    Raises:
        ValidationError: If the payload is not JSON serializable
    """
    if isinstance(payload, str):
        return payload
    try:
        return json.dumps(
            payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Proposal payload is not JSON serializable: {e}") from e


def get_join_hash(
    wallet_name: str,
    name: str,
    auth_public_key: Union[PublicKey, bytes],
    account_key: HDNode,
    network: Network = Network.MAINNET
) -> bytes:
    """
    Compute the digest a cosigner signs to join a wallet.

    Args:
        wallet_name: Wallet being joined
        name: Cosigner display name
        auth_public_key: Compressed authorization public key
        account_key: Account extended key (its public projection is hashed)
        network: Network used to encode the xpub

    Returns:
        32-byte digest
    """
    if isinstance(auth_public_key, PublicKey):
        auth_public_key = auth_public_key.point

    payload = b"".join([
        write_var_string(JOIN_MESSAGE),
        write_var_string(wallet_name),
        write_var_string(name),
        write_var_bytes(auth_public_key),
        write_var_string(account_key.xpubkey(network)),
    ])

    return hash_message(payload)


def get_proposal_hash(wallet_name: str, payload_type: int, payload: Any) -> bytes:
    """
    Compute the digest signed for a proposal message.

    Args:
        wallet_name: Wallet the proposal belongs to
        payload_type: 8-bit payload tag
        payload: String or JSON-serializable object

    Returns:
        32-byte digest

    Raises:
        ValidationError: If payload_type does not fit in a byte
    """
    if isinstance(payload_type, bool) or not isinstance(payload_type, int):
        raise ValidationError(f"Proposal type must be an int, got {type(payload_type).__name__}")
    if payload_type & 0xff != payload_type:
        raise ValidationError(f"Proposal type must fit in 8 bits, got {payload_type}")

    data = b"".join([
        write_var_string(PROPOSAL_MESSAGE),
        write_var_string(wallet_name),
        bytes([payload_type]),
        write_var_string(encode_proposal_payload(payload)),
    ])

    return hash_message(data)


def derive_proof_node(account_key: HDNode) -> HDNode:
    """Derive account/PROOF_INDEX/0; works on private or public account nodes."""
    return account_key.derive(PROOF_INDEX).derive(0)


def derive_proof_key(account_private_key: HDNode) -> PrivateKey:
    """Private key that signs the xpub proof."""
    if account_private_key.private_key is None:
        raise CryptoError("Proof key requires a private account node")
    return derive_proof_node(account_private_key).get_private_key()


def verify_join_signature(
    signature: bytes,
    join_hash: bytes,
    join_public_key: Union[PublicKey, bytes]
) -> bool:
    """Check a join signature against the joiner's join public key."""
    return verify_hash(signature, join_hash, join_public_key)


def verify_xpub_proof(proof: bytes, join_hash: bytes, account_key: HDNode) -> bool:
    """Check that proof was made by the holder of account_key's private half."""
    proof_public_key = derive_proof_node(account_key.to_public()).get_public_key()
    return verify_hash(proof, join_hash, proof_public_key)


def verify_proposal_signature(
    signature: bytes,
    proposal_hash: bytes,
    auth_public_key: Union[PublicKey, bytes]
) -> bool:
    """Check a proposal signature against the cosigner's auth public key."""
    return verify_hash(signature, proposal_hash, auth_public_key)
