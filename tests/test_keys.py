import pytest

from cosign.crypto.keys import PrivateKey, PublicKey
from cosign.crypto.signature import (
    hash_message, sign_hash, recover_public_key, verify_hash,
)
from cosign.exceptions import CryptoError, ValidationError


def test_private_key_roundtrip():
    key = PrivateKey.from_seed(b"seed")
    assert PrivateKey(key.hex()) == key
    assert PrivateKey(key) == key
    assert PrivateKey(key.secret).secret == key.secret
    assert "..." in repr(key)


def test_private_key_rejects_invalid_scalars():
    with pytest.raises(ValidationError):
        PrivateKey(b"\x00" * 32)
    with pytest.raises(ValidationError):
        PrivateKey(b"\x01" * 31)


def test_create_generates_distinct_keys():
    assert PrivateKey.create() != PrivateKey.create()


def test_public_key_generator_point():
    one = PrivateKey((1).to_bytes(32, "big"))
    pub = one.public_key(compressed=True)
    assert pub.hex() == "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
    assert len(one.public_key(compressed=False).point) == 65
    assert PublicKey(pub.point) == pub


def test_public_key_rejects_off_curve_point():
    with pytest.raises(ValidationError):
        PublicKey(b"\x02" + b"\x00" * 32)


def test_compact_signature_recovers_signer():
    key = PrivateKey.from_seed(b"seed")
    digest = hash_message("hello")
    sig = sign_hash(digest, key)
    assert len(sig) == 65
    assert 31 <= sig[0] <= 34
    assert recover_public_key(sig, digest) == key.public_key()
    assert verify_hash(sig, digest, key.public_key().point)


def test_compact_signature_is_deterministic():
    key = PrivateKey.from_seed(b"seed")
    digest = hash_message(b"hello")
    assert sign_hash(digest, key) == sign_hash(digest, key.secret)


def test_verify_hash_rejects_wrong_key_and_garbage():
    key = PrivateKey.from_seed(b"seed")
    other = PrivateKey.from_seed(b"other")
    digest = hash_message(b"hello")
    sig = sign_hash(digest, key)
    assert not verify_hash(sig, digest, other.public_key())
    assert not verify_hash(sig, hash_message(b"bye"), key.public_key())
    assert not verify_hash(sig[:-1], digest, key.public_key())
    assert not verify_hash(bytes([27]) + sig[1:], digest, key.public_key())
    assert not verify_hash(sig, digest, b"\x05" * 33)
    with pytest.raises(CryptoError):
        recover_public_key(b"\x00" * 64, digest)
