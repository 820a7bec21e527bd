"""Common type definitions for cosign."""

from typing import NewType

__all__ = [
    "HexStr",
    "PrivateKeyBytes",
    "PublicKeyBytes",
    "Signature",
    "Fingerprint",
    "ExtendedKeyStr",
]

# Basic types
HexStr = NewType("HexStr", str)
"""Hexadecimal string representation."""

ExtendedKeyStr = NewType("ExtendedKeyStr", str)
"""Base58Check encoded BIP32 extended key (xprv/xpub/tprv/tpub)."""

# Crypto types
PrivateKeyBytes = NewType("PrivateKeyBytes", bytes)
"""32-byte private key."""

PublicKeyBytes = NewType("PublicKeyBytes", bytes)
"""33 or 65 byte public key."""

Signature = NewType("Signature", bytes)
"""65-byte compact recoverable signature (BIP-137 header + r + s)."""

Fingerprint = NewType("Fingerprint", int)
"""Unsigned 32-bit key fingerprint."""
