"""Wire and snapshot payload definitions for cosign."""

from typing import TypedDict

__all__ = [
    "ContextSnapshot",
    "CosignerPayload",
    "JoinRequest",
]


class ContextSnapshot(TypedDict):
    """Serialized CosignerContext (private, persist only)."""
    name: str
    walletName: str
    token: str
    data: str
    network: str
    master: str
    joinPrivKey: str
    authPrivKey: str
    fingerPrint: int


class CosignerPayload(TypedDict):
    """Public cosigner fields sent when joining a wallet."""
    name: str
    purpose: int
    fingerPrint: int
    data: str
    token: str
    accountKey: str
    accountKeyProof: str
    authPubKey: str


class JoinRequest(TypedDict):
    """Body of a wallet join request."""
    cosigner: CosignerPayload
    joinSignature: str
