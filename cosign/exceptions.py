"""cosign exceptions hierarchy."""

from typing import Any, Optional

__all__ = [
    "CosignError",
    "CryptoError",
    "ValidationError",
    "SerializationError",
    "InvalidKeyMaterial",
    "InvalidConfiguration",
    "MissingIdentityField",
    "MalformedSnapshot",
]


class CosignError(Exception):
    """Base exception for all cosign errors."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        data: Optional[Any] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class CryptoError(CosignError):
    """Raised when cryptographic operation fails."""
    pass


class ValidationError(CosignError):
    """Raised when validation fails."""
    pass


class SerializationError(CosignError):
    """Raised when serialization/deserialization fails."""
    pass


class InvalidKeyMaterial(CryptoError, ValidationError):
    """Raised when supplied private key bytes or an HD key are not usable."""
    pass


class InvalidConfiguration(ValidationError):
    """Raised when an option has the wrong type or shape."""
    pass


class MissingIdentityField(CosignError):
    """Raised when a proof is requested before its inputs are populated."""

    def __init__(self, field: str, message: Optional[str] = None) -> None:
        if message is None:
            message = f"Identity field is not set: {field}"
        super().__init__(message, data={"field": field})
        self.field = field


class MalformedSnapshot(SerializationError):
    """Raised when a serialized context cannot be restored."""
    pass
