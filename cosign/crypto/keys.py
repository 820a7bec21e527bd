"""Key management for cosign."""

import secrets
from typing import Optional, Union

from coincurve import PrivateKey as SecpPrivateKey, PublicKey as SecpPublicKey

from ..exceptions import CryptoError, ValidationError
from ..types.common import PrivateKeyBytes, PublicKeyBytes
from ..utils.encoding import hash160, sha256
from ..utils.validation import validate_private_key, validate_public_key

__all__ = ["PrivateKey", "PublicKey"]


class PrivateKey:
    """
    secp256k1 private key wrapper.

    Handles scalar validation, public key derivation and signing over
    32-byte digests.
    """

    def __init__(self, key: Union[bytes, str, "PrivateKey"]) -> None:
        """
        Initialize private key.

        Args:
            key: Private key as 32 bytes, hex string, or another PrivateKey

        Raises:
            ValidationError: If key format is invalid
        """
        if isinstance(key, PrivateKey):
            key = key.secret

        # Validate and normalize key
        self._secret = PrivateKeyBytes(validate_private_key(key))

        # Initialize crypto library
        self._key = SecpPrivateKey(self._secret)

    @classmethod
    def create(cls) -> "PrivateKey":
        """
        Create new random private key.

        Returns:
            New PrivateKey instance
        """
        # Generate cryptographically secure random bytes
        while True:
            key_bytes = secrets.token_bytes(32)
            try:
                # Validate key is within valid range
                return cls(key_bytes)
            except ValidationError:
                # Extremely rare, try again
                continue

    @classmethod
    def from_seed(cls, seed: bytes) -> "PrivateKey":
        """Create private key from SHA256 of arbitrary seed bytes."""
        return cls(sha256(seed))

    @property
    def secret(self) -> PrivateKeyBytes:
        """Get private key as bytes."""
        return self._secret

    def hex(self) -> str:
        """Get private key as hex string."""
        return self._secret.hex()

    def public_key(self, compressed: bool = True) -> "PublicKey":
        """
        Get corresponding public key.

        Args:
            compressed: Return compressed format

        Returns:
            PublicKey instance
        """
        serialized = self._key.public_key.format(compressed=compressed)
        return PublicKey(serialized, compressed=compressed)

    def sign_recoverable(self, message_hash: bytes) -> bytes:
        """
        Create recoverable signature.

        Args:
            message_hash: 32-byte hash to sign

        Returns:
            65-byte recoverable signature (r || s || recovery id)

        Raises:
            CryptoError: If signing fails
        """
        if len(message_hash) != 32:
            raise ValueError("Message hash must be 32 bytes")

        try:
            return self._key.sign_recoverable(message_hash, hasher=None)
        except Exception as e:
            raise CryptoError(f"Recoverable signing failed: {e}") from e

    def __eq__(self, other: object) -> bool:
        """Check equality."""
        if not isinstance(other, PrivateKey):
            return False
        return self._secret == other._secret

    def __repr__(self) -> str:
        """String representation."""
        # Show first and last 4 chars of hex for security
        hex_str = self.hex()
        masked = f"{hex_str[:4]}...{hex_str[-4:]}"
        return f"PrivateKey({masked})"


class PublicKey:
    """secp256k1 public key wrapper."""

    def __init__(
        self,
        key: Union[bytes, str, "PublicKey"],
        compressed: Optional[bool] = None
    ) -> None:
        """
        Initialize public key.

        Args:
            key: Public key as bytes, hex string, or another PublicKey
            compressed: Whether key is compressed (auto-detected if None)

        Raises:
            ValidationError: If key format or curve point is invalid
        """
        if isinstance(key, PublicKey):
            self._key = key._key
            self._compressed = key._compressed if compressed is None else compressed
            return

        # Validate and normalize key
        key_bytes = validate_public_key(key)

        # Detect compression
        if compressed is None:
            self._compressed = len(key_bytes) == 33
        else:
            self._compressed = compressed

        # Initialize crypto library
        try:
            self._key = SecpPublicKey(key_bytes)
        except (ValueError, TypeError) as e:
            raise ValidationError(f"Public key is not on the curve: {e}") from e

    @classmethod
    def from_signature_and_hash(cls, recoverable: bytes, message_hash: bytes) -> "PublicKey":
        """
        Recover public key from a 65-byte r || s || recovery id signature.

        Raises:
            CryptoError: If recovery fails
        """
        try:
            recovered = SecpPublicKey.from_signature_and_message(
                recoverable, message_hash, hasher=None
            )
        except Exception as e:
            raise CryptoError(f"Public key recovery failed: {e}") from e
        return cls(recovered.format(compressed=True))

    @property
    def point(self) -> PublicKeyBytes:
        """Get public key as bytes."""
        return PublicKeyBytes(self._key.format(compressed=self._compressed))

    @property
    def compressed(self) -> bool:
        return self._compressed

    def hex(self) -> str:
        """Get public key as hex string."""
        return self.point.hex()

    def hash160(self) -> bytes:
        """Get HASH160 of public key."""
        return hash160(self.point)

    def tweak_add(self, tweak: bytes) -> "PublicKey":
        """
        Return P + tweak*G.

        Raises:
            CryptoError: If the result is the point at infinity or tweak is invalid
        """
        try:
            tweaked = self._key.add(tweak)
        except Exception as e:
            raise CryptoError(f"Public key tweak failed: {e}") from e
        return PublicKey(tweaked.format(compressed=self._compressed))

    def __eq__(self, other: object) -> bool:
        """Check equality."""
        if not isinstance(other, PublicKey):
            return False
        return self._key.format(compressed=True) == other._key.format(compressed=True)

    def __hash__(self) -> int:
        return hash(self._key.format(compressed=True))

    def __repr__(self) -> str:
        """String representation."""
        return f"PublicKey({self.hex()})"
