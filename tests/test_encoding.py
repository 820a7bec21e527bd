import pytest
from cosign.exceptions import ValidationError
from cosign.utils.encoding import (
    hex_to_bytes, bytes_to_hex, encode_varint, decode_varint,
    write_var_bytes, write_var_string,
    encode_base58, decode_base58, encode_base58_check, decode_base58_check,
    hash160,
)


def test_hex_bytes_roundtrip():
    data = b"\x00\x01deadbeef"
    hex_str = bytes_to_hex(data, prefix=True)
    assert hex_str.startswith("0x")
    assert hex_to_bytes(hex_str) == data
    with pytest.raises(ValidationError):
        hex_to_bytes("zzzz")
    with pytest.raises(ValidationError):
        hex_to_bytes(b"00")


def test_varint_roundtrip():
    for value in [0, 1, 252, 253, 65535, 65536, 2**32 + 1]:
        encoded = encode_varint(value)
        decoded, offset = decode_varint(encoded)
        assert decoded == value
        assert offset == len(encoded)


def test_varint_truncated():
    with pytest.raises(ValidationError):
        decode_varint(b"\xfd\x01")


def test_var_bytes_prefix():
    assert write_var_bytes(b"abc") == b"\x03abc"
    assert write_var_string("") == b"\x00"
    assert write_var_string("é") == b"\x02\xc3\xa9"


def test_var_string_boundaries_are_unambiguous():
    assert write_var_string("ab") + write_var_string("c") != write_var_string("a") + write_var_string("bc")


def test_base58_roundtrip():
    payload = b"hello world"
    encoded = encode_base58(payload)
    assert decode_base58(encoded) == payload
    assert encode_base58(b"\x00\x00\x01") == "112"
    assert decode_base58("112") == b"\x00\x00\x01"
    with pytest.raises(ValidationError):
        decode_base58("0OIl")


def test_base58check_roundtrip():
    payload = b"test payload"
    enc = encode_base58_check(payload)
    dec = decode_base58_check(enc)
    assert dec == payload
    with pytest.raises(ValidationError):
        decode_base58_check(enc[:-1] + ("2" if enc[-1] != "2" else "3"))


def test_hash160_known_value():
    # hash160 of the empty string
    assert hash160(b"").hex() == "b472a266d0bd89c13706a4132ccfb16f7c3b9fcb"
