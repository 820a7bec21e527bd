"""
cosign

Cryptographic identity of a single cosigner in a multisig wallet-join
protocol: BIP32/BIP44 account derivation, join proofs and proposal
signatures.
"""

from .constants import Network, NULL_TOKEN, PROOF_INDEX
from .context import CosignerContext
from .cosigner import Cosigner
from .options import ContextOptions
from .exceptions import (
    CosignError,
    CryptoError,
    ValidationError,
    SerializationError,
    InvalidKeyMaterial,
    InvalidConfiguration,
    MissingIdentityField,
    MalformedSnapshot,
)
from .crypto import HDNode, PrivateKey, PublicKey
from .types import ProposalPayloadType

__version__ = "1.0.0"

__all__ = [
    # Identity
    "CosignerContext",
    "ContextOptions",
    "Cosigner",
    "ProposalPayloadType",

    # Network
    "Network",
    "NULL_TOKEN",
    "PROOF_INDEX",

    # Exceptions
    "CosignError",
    "CryptoError",
    "ValidationError",
    "SerializationError",
    "InvalidKeyMaterial",
    "InvalidConfiguration",
    "MissingIdentityField",
    "MalformedSnapshot",

    # Crypto
    "HDNode",
    "PrivateKey",
    "PublicKey",
]


def create_context(
    name: str = "cosigner",
    wallet_name: str = "",
    network: Network = Network.MAINNET,
    **kwargs
) -> CosignerContext:
    """
    Create a cosigner context with freshly generated keys.

    Args:
        name: Cosigner display name
        wallet_name: Wallet to join
        network: Network for extended key encoding
        **kwargs: Additional ContextOptions fields

    Returns:
        Initialized CosignerContext

    Example:
        >>> ctx = cosign.create_context("alice", "shared-wallet")
        >>> ctx.to_http_options()["cosigner"]["name"]
        'alice'
    """
    return CosignerContext(name=name, wallet_name=wallet_name, network=network, **kwargs)
