"""Encoding and decoding utilities for cosign."""

import hashlib
import struct
from typing import Tuple, Union

from ..exceptions import ValidationError
from ..types.common import HexStr

__all__ = [
    "hex_to_bytes",
    "bytes_to_hex",
    "bytes_to_int",
    "encode_varint",
    "decode_varint",
    "write_var_bytes",
    "write_var_string",
    "sha256",
    "double_sha256",
    "hash160",
    "encode_base58",
    "decode_base58",
    "encode_base58_check",
    "decode_base58_check",
]

# Constants
BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


def hex_to_bytes(hex_str: Union[HexStr, str]) -> bytes:
    """
    Convert hex string to bytes.

    Args:
        hex_str: Hex string with or without 0x prefix

    Returns:
        Decoded bytes

    Raises:
        ValidationError: If hex string is invalid
    """
    if not isinstance(hex_str, str):
        raise ValidationError(f"Expected hex string, got {type(hex_str).__name__}")
    try:
        # Remove 0x prefix if present
        if hex_str.startswith("0x"):
            hex_str = hex_str[2:]
        return bytes.fromhex(hex_str)
    except ValueError as e:
        raise ValidationError(f"Invalid hex string: {hex_str}") from e


def bytes_to_hex(data: bytes, prefix: bool = False) -> HexStr:
    """
    Convert bytes to hex string.

    Args:
        data: Bytes to encode
        prefix: Add 0x prefix

    Returns:
        Hex string
    """
    hex_str = data.hex()
    if prefix:
        hex_str = f"0x{hex_str}"
    return HexStr(hex_str)


def bytes_to_int(
    data: bytes,
    byteorder: str = "big",
    signed: bool = False
) -> int:
    """Convert bytes to integer."""
    return int.from_bytes(data, byteorder=byteorder, signed=signed)


def encode_varint(n: int) -> bytes:
    """
    Encode integer as Bitcoin variable length integer.

    Args:
        n: Integer to encode

    Returns:
        Encoded varint bytes
    """
    if n < 0:
        raise ValidationError("Varint cannot be negative")
    if n < 0xfd:
        return bytes([n])
    elif n <= 0xffff:
        return b"\xfd" + struct.pack("<H", n)
    elif n <= 0xffffffff:
        return b"\xfe" + struct.pack("<I", n)
    else:
        return b"\xff" + struct.pack("<Q", n)


def decode_varint(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Decode Bitcoin variable length integer.

    Args:
        data: Bytes containing varint
        offset: Starting position

    Returns:
        Tuple of (value, new_offset)
    """
    try:
        if data[offset] < 0xfd:
            return data[offset], offset + 1
        elif data[offset] == 0xfd:
            return struct.unpack_from("<H", data, offset + 1)[0], offset + 3
        elif data[offset] == 0xfe:
            return struct.unpack_from("<I", data, offset + 1)[0], offset + 5
        else:
            return struct.unpack_from("<Q", data, offset + 1)[0], offset + 9
    except (IndexError, struct.error) as e:
        raise ValidationError("Truncated varint") from e


def write_var_bytes(data: bytes) -> bytes:
    """Length-prefix bytes with a varint."""
    return encode_varint(len(data)) + data


def write_var_string(value: str) -> bytes:
    """Length-prefix the UTF-8 encoding of a string with a varint."""
    return write_var_bytes(value.encode("utf-8"))


def sha256(data: bytes) -> bytes:
    """Perform single SHA256 hash."""
    return hashlib.sha256(data).digest()


def double_sha256(data: bytes) -> bytes:
    """Perform double SHA256 hash."""
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def hash160(data: bytes) -> bytes:
    """Perform RIPEMD160(SHA256(data))."""
    sha256_hash = hashlib.sha256(data).digest()
    return hashlib.new("ripemd160", sha256_hash).digest()


def encode_base58(data: bytes) -> str:
    """
    Encode bytes as Base58 string.

    Args:
        data: Bytes to encode

    Returns:
        Base58 encoded string
    """
    # Convert to integer
    n = bytes_to_int(data, byteorder="big")

    # Encode
    encoded = ""
    while n:
        n, remainder = divmod(n, 58)
        encoded = BASE58_ALPHABET[remainder] + encoded

    # Add leading zeros
    for byte in data:
        if byte == 0:
            encoded = "1" + encoded
        else:
            break

    return encoded


def decode_base58(string: str) -> bytes:
    """
    Decode Base58 string to bytes.

    Args:
        string: Base58 string

    Returns:
        Decoded bytes

    Raises:
        ValidationError: If string contains invalid characters
    """
    if not isinstance(string, str):
        raise ValidationError(f"Expected Base58 string, got {type(string).__name__}")

    # Decode to integer
    n = 0
    for char in string:
        try:
            n = n * 58 + BASE58_ALPHABET.index(char)
        except ValueError:
            raise ValidationError(f"Invalid Base58 character: {char}")

    # Convert to bytes
    body = n.to_bytes((n.bit_length() + 7) // 8, "big") if n else b""

    # Add leading zeros
    leading_zeros = len(string) - len(string.lstrip("1"))
    return b"\x00" * leading_zeros + body


def encode_base58_check(data: bytes) -> str:
    """
    Encode bytes as Base58Check (with checksum).

    Args:
        data: Bytes to encode

    Returns:
        Base58Check encoded string
    """
    checksum = double_sha256(data)[:4]
    return encode_base58(data + checksum)


def decode_base58_check(string: str) -> bytes:
    """
    Decode Base58Check string.

    Args:
        string: Base58Check string

    Returns:
        Decoded data (without checksum)

    Raises:
        ValidationError: If checksum is invalid
    """
    data = decode_base58(string)
    if len(data) < 4:
        raise ValidationError("Invalid Base58Check string: too short")

    payload, checksum = data[:-4], data[-4:]
    expected_checksum = double_sha256(payload)[:4]

    if checksum != expected_checksum:
        raise ValidationError("Invalid Base58Check checksum")

    return payload
