"""Type definitions for cosign."""

# Common types
from ..types.common import (
    HexStr,
    ExtendedKeyStr,
    PrivateKeyBytes,
    PublicKeyBytes,
    Signature,
    Fingerprint,
)

# Protocol types
from ..types.proposal import ProposalPayloadType

__all__ = [
    # Common
    "HexStr",
    "ExtendedKeyStr",
    "PrivateKeyBytes",
    "PublicKeyBytes",
    "Signature",
    "Fingerprint",

    # Protocol
    "ProposalPayloadType",
]
