"""Validation utilities for cosign."""

import re
from typing import Union

from ..constants import SECP256K1_ORDER, TOKEN_SIZE
from ..exceptions import ValidationError

__all__ = [
    "is_valid_private_key",
    "validate_private_key",
    "is_valid_public_key",
    "validate_public_key",
    "validate_bytes",
    "validate_token",
    "validate_name",
]

# Regex patterns
HEX_PATTERN = re.compile(r"^[0-9a-fA-F]*$")


def is_valid_private_key(key: Union[str, bytes]) -> bool:
    """
    Check if private key format is valid.

    Args:
        key: Private key as hex string or bytes

    Returns:
        True if valid, False otherwise
    """
    try:
        validate_private_key(key)
        return True
    except ValidationError:
        return False


def validate_private_key(key: Union[str, bytes]) -> bytes:
    """
    Validate private key and return as bytes.

    Args:
        key: Private key as hex string or bytes

    Returns:
        Private key as 32 bytes

    Raises:
        ValidationError: If private key is invalid
    """
    if isinstance(key, str):
        if key.startswith("0x"):
            key = key[2:]
        if not HEX_PATTERN.match(key):
            raise ValidationError("Private key must be hexadecimal")
        try:
            key = bytes.fromhex(key)
        except ValueError as e:
            raise ValidationError(f"Invalid hex private key: {e}") from e

    if not isinstance(key, (bytes, bytearray)):
        raise ValidationError(f"Private key must be bytes, got {type(key).__name__}")

    if len(key) != 32:
        raise ValidationError(f"Private key must be 32 bytes, got {len(key)}")

    # Check range
    key_int = int.from_bytes(key, "big")

    if key_int == 0:
        raise ValidationError("Private key cannot be zero")
    if key_int >= SECP256K1_ORDER:
        raise ValidationError("Private key exceeds curve order")

    return bytes(key)


def is_valid_public_key(key: Union[str, bytes]) -> bool:
    """Check if public key format is valid."""
    try:
        validate_public_key(key)
        return True
    except ValidationError:
        return False


def validate_public_key(key: Union[str, bytes]) -> bytes:
    """
    Validate public key and return as bytes.

    Args:
        key: Public key as hex string or bytes

    Returns:
        Public key bytes (33 or 65 bytes)

    Raises:
        ValidationError: If public key is invalid
    """
    if isinstance(key, str):
        if key.startswith("0x"):
            key = key[2:]
        if not HEX_PATTERN.match(key):
            raise ValidationError("Public key must be hexadecimal")
        try:
            key = bytes.fromhex(key)
        except ValueError as e:
            raise ValidationError(f"Invalid hex public key: {e}") from e

    if not isinstance(key, (bytes, bytearray)):
        raise ValidationError(f"Public key must be bytes, got {type(key).__name__}")

    if len(key) == 33:
        if key[0] not in (0x02, 0x03):
            raise ValidationError("Compressed public key must start with 0x02 or 0x03")
    elif len(key) == 65:
        if key[0] != 0x04:
            raise ValidationError("Uncompressed public key must start with 0x04")
    else:
        raise ValidationError(f"Public key must be 33 or 65 bytes, got {len(key)}")

    return bytes(key)


def validate_bytes(value: object, field: str) -> bytes:
    """
    Require a bytes-like value.

    Raises:
        ValidationError: If value is not bytes or bytearray
    """
    if not isinstance(value, (bytes, bytearray)):
        raise ValidationError(f"{field} must be bytes, got {type(value).__name__}")
    return bytes(value)


def validate_token(token: object) -> bytes:
    """
    Validate an authorization token.

    Raises:
        ValidationError: If token is not exactly 32 bytes
    """
    token = validate_bytes(token, "token")
    if len(token) != TOKEN_SIZE:
        raise ValidationError(f"token must be {TOKEN_SIZE} bytes, got {len(token)}")
    return token


def validate_name(value: object, field: str) -> str:
    """
    Require a string display identifier.

    Empty strings are accepted here; proofs reject them later.
    """
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string, got {type(value).__name__}")
    return value
