import pytest

from cosign.utils import validation as v
from cosign.constants import SECP256K1_ORDER


def test_private_key_validation():
    key = b"\x01" * 32
    assert v.is_valid_private_key(key)
    assert v.validate_private_key(key.hex()) == key
    assert v.validate_private_key("0x" + key.hex()) == key
    assert not v.is_valid_private_key(b"\x00" * 32)
    assert not v.is_valid_private_key(SECP256K1_ORDER.to_bytes(32, "big"))
    assert not v.is_valid_private_key(b"\x01" * 31)
    with pytest.raises(v.ValidationError):
        v.validate_private_key("xyz")
    with pytest.raises(v.ValidationError):
        v.validate_private_key(12345)


def test_public_key_validation():
    assert v.is_valid_public_key(b"\x02" + b"\x11" * 32)
    assert not v.is_valid_public_key(b"\x05" + b"\x11" * 32)
    assert not v.is_valid_public_key(b"\x04" * 10)
    with pytest.raises(v.ValidationError):
        v.validate_public_key("zz")


def test_token_validation():
    assert v.validate_token(bytearray(32)) == b"\x00" * 32
    with pytest.raises(v.ValidationError):
        v.validate_token(b"\x00" * 31)
    with pytest.raises(v.ValidationError):
        v.validate_token("00" * 32)


def test_name_validation():
    assert v.validate_name("", "name") == ""
    assert v.validate_name("alice", "name") == "alice"
    with pytest.raises(v.ValidationError):
        v.validate_name(7, "name")
