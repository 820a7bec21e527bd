"""Public cosigner record."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .constants import DEFAULT_PURPOSE, NULL_TOKEN, Network
from .crypto.hd import HDNode
from .crypto.keys import PublicKey
from .crypto.proof import get_join_hash, verify_join_signature
from .exceptions import ValidationError
from .types.common import ExtendedKeyStr, Fingerprint, PublicKeyBytes, Signature
from .utils.encoding import hex_to_bytes
from .utils.validation import validate_name, validate_public_key, validate_token

__all__ = ["Cosigner"]


@dataclass(frozen=True)
class Cosigner:
    """
    Exportable view of a cosigner identity.

    Holds only public material and is safe to send to peers.
    """

    name: str
    account_key: HDNode
    auth_public_key: PublicKeyBytes
    join_signature: Signature
    fingerprint: Fingerprint
    token: bytes = NULL_TOKEN
    purpose: int = DEFAULT_PURPOSE

    def __post_init__(self) -> None:
        if self.account_key.private_key is not None:
            raise ValidationError("Cosigner account key must be public")

    def xpub(self, network: Optional[Network] = None) -> ExtendedKeyStr:
        """Account extended public key."""
        return self.account_key.xpubkey(network)

    def join_hash(self, wallet_name: str, network: Optional[Network] = None) -> bytes:
        """Recompute the join digest this cosigner signed for wallet_name."""
        return get_join_hash(
            wallet_name,
            self.name,
            self.auth_public_key,
            self.account_key,
            Network.get(network or self.account_key.network),
        )

    def verify_join(
        self,
        wallet_name: str,
        join_public_key: Union[PublicKey, bytes],
        network: Optional[Network] = None
    ) -> bool:
        """Check join_signature against the wallet's join public key."""
        return verify_join_signature(
            self.join_signature,
            self.join_hash(wallet_name, network),
            join_public_key,
        )

    def to_dict(self, network: Optional[Network] = None) -> Dict[str, Any]:
        return {
            "name": self.name,
            "purpose": self.purpose,
            "fingerPrint": self.fingerprint,
            "token": self.token.hex(),
            "accountKey": self.xpub(network),
            "authPubKey": self.auth_public_key.hex(),
            "joinSignature": self.join_signature.hex(),
        }

    @classmethod
    def from_dict(cls, obj: Dict[str, Any], network: Optional[Network] = None) -> "Cosigner":
        """
        Parse a cosigner record produced by to_dict.

        Raises:
            ValidationError: If any field is missing or malformed
        """
        try:
            account_key = HDNode.from_base58(obj["accountKey"], network)
            fingerprint = obj["fingerPrint"]
            purpose = obj["purpose"]
            join_signature = hex_to_bytes(obj["joinSignature"])
            auth_public_key = validate_public_key(obj["authPubKey"])
            token = validate_token(hex_to_bytes(obj["token"]))
            name = validate_name(obj["name"], "name")
        except KeyError as e:
            raise ValidationError(f"Cosigner record is missing {e}") from e

        if account_key.private_key is not None:
            raise ValidationError("Cosigner record must not carry a private key")
        if (
            isinstance(fingerprint, bool)
            or not isinstance(fingerprint, int)
            or not 0 <= fingerprint <= 0xffffffff
        ):
            raise ValidationError("fingerPrint must be an unsigned 32-bit integer")
        if isinstance(purpose, bool) or not isinstance(purpose, int):
            raise ValidationError("purpose must be an integer")

        return cls(
            name=name,
            account_key=account_key,
            auth_public_key=PublicKeyBytes(auth_public_key),
            join_signature=Signature(join_signature),
            fingerprint=Fingerprint(fingerprint),
            token=token,
            purpose=purpose,
        )
