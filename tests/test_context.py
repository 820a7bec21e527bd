import json
from dataclasses import FrozenInstanceError
from concurrent.futures import ThreadPoolExecutor

import pytest

from cosign import create_context
from cosign.constants import NULL_TOKEN, Network
from cosign.context import CosignerContext
from cosign.cosigner import Cosigner
from cosign.crypto.hd import HDNode
from cosign.crypto.keys import PrivateKey
from cosign.crypto.proof import get_join_hash, get_proposal_hash, verify_xpub_proof
from cosign.crypto.signature import verify_hash
from cosign.exceptions import (
    InvalidConfiguration,
    InvalidKeyMaterial,
    MalformedSnapshot,
    MissingIdentityField,
    ValidationError,
)
from cosign.types import ProposalPayloadType
from cosign.utils.encoding import hash160

# BIP32 test vector 1 seed
SEED = bytes.fromhex("000102030405060708090a0b0c0d0e0f")
GOLDEN_FINGERPRINT = 876747070
# m/44'/0'/0' of the seed above
GOLDEN_ACCOUNT_XPUB = (
    "xpub6CDEarkRoiwWPj3n3gYygGwgoGchxYg3g6Zs5L2nB4B6wdojzcWCKKHMu9XuY1GyYygRfrVembjAko1T5xTsxj7ecKXxEPzDxx7nCK8Dxtx"
)
GOLDEN_ACCOUNT_TPUB = (
    "tpubDCas76a7WztxfXEdVsY4tCH48PiMwwB7DjAARt5vWxvzgvUT4qMHTkxC9Bch4WEDLtDLHS1XJhZDSyW4UpK7rAZwfvHFuveTYuiBxKAEB51"
)
JOIN_KEY = bytes.fromhex("11" * 32)
AUTH_KEY = bytes.fromhex("22" * 32)


def _context(**overrides):
    options = {
        "name": "alice",
        "walletName": "shared-wallet",
        "master": HDNode.from_seed(SEED),
        "joinPrivKey": JOIN_KEY,
        "authPrivKey": AUTH_KEY,
    }
    options.update(overrides)
    return CosignerContext(options)


def test_golden_fixture():
    ctx = _context()
    assert ctx.fingerprint == GOLDEN_FINGERPRINT
    assert ctx.purpose == 44
    assert ctx.xpub == GOLDEN_ACCOUNT_XPUB
    assert ctx.account_key.depth == 3
    assert ctx.account_key.private_key is None


def test_fingerprint_is_hash160_of_master_public_key():
    ctx = CosignerContext()
    expected = int.from_bytes(hash160(ctx.master.public_key)[:4], "big")
    assert ctx.fingerprint == expected


def test_generates_missing_key_material():
    a = CosignerContext(name="alice", wallet_name="w")
    b = CosignerContext(name="alice", wallet_name="w")
    assert a.master != b.master
    assert a.join_private_key != b.join_private_key
    assert a.auth_private_key != b.auth_private_key
    assert a.token == NULL_TOKEN
    assert a.data == b""


def test_public_keys_derived_from_private():
    ctx = _context()
    assert ctx.join_public_key == PrivateKey(JOIN_KEY).public_key().point
    assert ctx.auth_public_key == PrivateKey(AUTH_KEY).public_key().point
    assert len(ctx.auth_public_key) == 33


def test_create_and_helpers():
    ctx = CosignerContext.create({"name": "bob", "walletName": "w"})
    assert ctx.name == "bob"
    assert CosignerContext.from_options({"name": "carol"}).name == "carol"
    assert create_context("dave", "w", Network.TESTNET).xpub.startswith("tpub")


def test_determinism_across_instances():
    a = _context()
    b = _context()
    assert a.join_hash == b.join_hash
    assert a.join_signature == b.join_signature
    assert a.xpub_proof == b.xpub_proof
    assert a.sign_proposal(0, "x") == b.sign_proposal(0, "x")
    assert a.join_signature is a.join_signature


def test_join_hash_matches_helper():
    ctx = _context()
    expected = get_join_hash(
        "shared-wallet", "alice", ctx.auth_public_key, ctx.account_key, Network.MAINNET
    )
    assert ctx.join_hash == expected


def test_signatures_verify():
    ctx = _context()
    assert verify_hash(ctx.join_signature, ctx.join_hash, ctx.join_public_key)
    assert verify_hash(ctx.xpub_proof, ctx.join_hash, ctx.proof_public_key)
    assert verify_xpub_proof(ctx.xpub_proof, ctx.join_hash, ctx.account_key)
    assert not verify_hash(ctx.xpub_proof, ctx.join_hash, ctx.join_public_key)

    sig = ctx.sign_proposal(ProposalPayloadType.CREATE, {"memo": "rent"})
    digest = get_proposal_hash("shared-wallet", 0, '{"memo":"rent"}')
    assert verify_hash(sig, digest, ctx.auth_public_key)


@pytest.mark.parametrize("overrides", [
    {"walletName": "other-wallet"},
    {"name": "bob"},
    {"authPrivKey": bytes.fromhex("33" * 32)},
    {"master": HDNode.from_seed(b"\x07" * 32)},
])
def test_join_hash_sensitivity(overrides):
    base = _context()
    changed = _context(**overrides)
    assert changed.join_hash != base.join_hash
    assert changed.join_signature != base.join_signature
    assert changed.xpub_proof != base.xpub_proof


def test_join_key_does_not_change_join_hash():
    base = _context()
    changed = _context(joinPrivKey=bytes.fromhex("44" * 32))
    assert changed.join_hash == base.join_hash
    assert changed.join_signature != base.join_signature
    assert changed.xpub_proof == base.xpub_proof


def test_domain_separation():
    ctx = _context()
    assert ctx.join_hash != get_proposal_hash(ctx.wallet_name, 0, ctx.name)


def test_sign_proposal_payloads():
    ctx = _context()
    assert ctx.sign_proposal(2, {"b": 1, "a": 2}) == ctx.sign_proposal(2, {"a": 2, "b": 1})
    assert ctx.sign_proposal(2, '{"a":2,"b":1}') == ctx.sign_proposal(2, {"a": 2, "b": 1})
    assert ctx.sign_proposal(1, "p") != ctx.sign_proposal(2, "p")
    assert ctx.sign_proposal(1, "p") != ctx.sign_proposal(1, "q")


def test_sign_proposal_errors():
    ctx = _context()
    with pytest.raises(InvalidConfiguration):
        ctx.sign_proposal(256, "p")
    with pytest.raises(InvalidConfiguration):
        ctx.sign_proposal(0, {"x": object()})
    with pytest.raises(InvalidConfiguration):
        ctx.sign_proposal(0, {"amount": float("nan")})
    with pytest.raises(InvalidConfiguration):
        ctx.sign_proposal(0, [float("inf")])
    with pytest.raises(MissingIdentityField):
        _context(walletName="").sign_proposal(0, "p")


def test_missing_wallet_name():
    ctx = _context(walletName="")
    with pytest.raises(MissingIdentityField) as exc:
        ctx.join_hash
    assert exc.value.field == "wallet_name"
    with pytest.raises(MissingIdentityField):
        ctx.join_signature
    with pytest.raises(MissingIdentityField):
        ctx.xpub_proof
    with pytest.raises(MissingIdentityField):
        ctx.to_cosigner()
    with pytest.raises(MissingIdentityField):
        ctx.to_http_options()


def test_missing_name():
    with pytest.raises(MissingIdentityField) as exc:
        _context(name="").join_hash
    assert exc.value.field == "name"


def test_short_join_key_rejected():
    with pytest.raises(InvalidKeyMaterial):
        _context(joinPrivKey=b"\x01" * 31)


def test_bad_options_rejected():
    with pytest.raises(InvalidConfiguration):
        _context(name=42)
    with pytest.raises(InvalidConfiguration):
        _context(token=b"\x00")
    with pytest.raises(InvalidKeyMaterial):
        _context(master=HDNode.from_seed(SEED).to_public())


def test_refresh_recomputes_proofs():
    ctx = _context()
    join_hash = ctx.join_hash
    join_signature = ctx.join_signature
    xpub_proof = ctx.xpub_proof
    cosigner = ctx.to_cosigner()

    ctx.wallet_name = "renamed-wallet"
    ctx.name = "alice2"
    assert ctx.join_hash == join_hash

    ctx.refresh()
    assert ctx.join_hash != join_hash
    assert ctx.join_signature != join_signature
    assert ctx.xpub_proof != xpub_proof
    assert ctx.to_cosigner().name == "alice2"
    assert ctx.to_cosigner() is not cosigner
    assert ctx.join_hash == _context(walletName="renamed-wallet", name="alice2").join_hash


def test_refresh_keeps_identity():
    ctx = _context()
    xpub = ctx.xpub
    fingerprint = ctx.fingerprint
    ctx.refresh()
    assert ctx.xpub == xpub
    assert ctx.fingerprint == fingerprint


def test_to_cosigner():
    ctx = _context(token=b"\x05" * 32)
    cosigner = ctx.to_cosigner()
    assert isinstance(cosigner, Cosigner)
    assert cosigner is ctx.to_cosigner()
    assert cosigner.name == "alice"
    assert cosigner.account_key == ctx.account_key
    assert cosigner.auth_public_key == ctx.auth_public_key
    assert cosigner.join_signature == ctx.join_signature
    assert cosigner.fingerprint == GOLDEN_FINGERPRINT
    assert cosigner.token == b"\x05" * 32
    assert cosigner.purpose == 44
    assert cosigner.verify_join("shared-wallet", ctx.join_public_key)
    assert not cosigner.verify_join("other-wallet", ctx.join_public_key)

    with pytest.raises(FrozenInstanceError):
        cosigner.name = "mallory"


def test_cosigner_dict_roundtrip():
    ctx = _context()
    record = ctx.to_cosigner().to_dict()
    assert record["accountKey"] == ctx.xpub
    assert Cosigner.from_dict(record) == ctx.to_cosigner()
    assert json.loads(json.dumps(record)) == record


@pytest.mark.parametrize("field,value", [
    ("fingerPrint", True),
    ("fingerPrint", -1),
    ("fingerPrint", 1 << 32),
    ("purpose", False),
    ("purpose", "44"),
])
def test_cosigner_from_dict_rejects_bad_integers(field, value):
    record = _context().to_cosigner().to_dict()
    record[field] = value
    with pytest.raises(ValidationError):
        Cosigner.from_dict(record)


def test_cosigner_uses_context_network_for_foreign_master():
    # master built for mainnet, context on testnet
    ctx = _context(network=Network.TESTNET)
    cosigner = ctx.to_cosigner()

    assert ctx.xpub == GOLDEN_ACCOUNT_TPUB
    assert cosigner.xpub() == ctx.xpub
    assert cosigner.join_hash("shared-wallet") == ctx.join_hash
    assert cosigner.verify_join("shared-wallet", ctx.join_public_key)
    assert cosigner.to_dict()["accountKey"] == ctx.to_http_options()["cosigner"]["accountKey"]

    restored = CosignerContext.from_json(ctx.to_json())
    assert restored.to_cosigner().to_dict() == cosigner.to_dict()
    assert Cosigner.from_dict(cosigner.to_dict()).verify_join("shared-wallet", ctx.join_public_key)


def test_to_http_options():
    ctx = _context(data=b"\xbe\xef")
    options = ctx.to_http_options()
    assert set(options) == {"cosigner", "joinSignature"}
    assert options["joinSignature"] == ctx.join_signature.hex()
    assert options["cosigner"] == {
        "name": "alice",
        "purpose": 44,
        "fingerPrint": GOLDEN_FINGERPRINT,
        "data": "beef",
        "token": "00" * 32,
        "accountKey": ctx.xpub,
        "accountKeyProof": ctx.xpub_proof.hex(),
        "authPubKey": ctx.auth_public_key.hex(),
    }
    json.dumps(options)


def test_to_json_fields():
    ctx = _context(data=b"\x01\x02")
    snapshot = ctx.to_json()
    assert snapshot == {
        "name": "alice",
        "walletName": "shared-wallet",
        "token": "00" * 32,
        "data": "0102",
        "network": "main",
        "master": HDNode.from_seed(SEED).xprivkey(),
        "joinPrivKey": JOIN_KEY.hex(),
        "authPrivKey": AUTH_KEY.hex(),
        "fingerPrint": GOLDEN_FINGERPRINT,
    }


@pytest.mark.parametrize("network", list(Network))
def test_json_roundtrip(network):
    ctx = CosignerContext(name="alice", wallet_name="w", network=network, token=b"\x09" * 32)
    restored = CosignerContext.from_json(ctx.to_json())

    assert restored.network == network
    assert restored.xpub == ctx.xpub
    assert restored.fingerprint == ctx.fingerprint
    assert restored.join_public_key == ctx.join_public_key
    assert restored.join_hash == ctx.join_hash
    assert restored.join_signature == ctx.join_signature
    assert restored.xpub_proof == ctx.xpub_proof
    assert restored.to_cosigner() == ctx.to_cosigner()
    assert restored.to_http_options() == ctx.to_http_options()
    assert restored.to_json() == ctx.to_json()


def test_json_string_roundtrip():
    ctx = _context()
    restored = CosignerContext.from_json_string(ctx.to_json_string())
    assert restored.to_http_options() == ctx.to_http_options()
    with pytest.raises(MalformedSnapshot):
        CosignerContext.from_json_string("{not json")


def test_from_json_rejects_fingerprint_mismatch():
    snapshot = _context().to_json()
    snapshot["fingerPrint"] = GOLDEN_FINGERPRINT + 1
    with pytest.raises(MalformedSnapshot):
        CosignerContext.from_json(snapshot)


@pytest.mark.parametrize("field,value", [
    ("master", "xprvnotakey"),
    ("master", HDNode.from_seed(SEED).xpubkey()),
    ("master", HDNode.from_seed(SEED, Network.TESTNET).xprivkey()),
    ("network", "moonnet"),
    ("token", "zz"),
    ("token", "00"),
    ("data", 5),
    ("name", None),
    ("fingerPrint", "876747070"),
])
def test_from_json_rejects_malformed_fields(field, value):
    snapshot = _context().to_json()
    snapshot[field] = value
    with pytest.raises(MalformedSnapshot):
        CosignerContext.from_json(snapshot)


def test_from_json_rejects_missing_fields():
    snapshot = _context().to_json()
    del snapshot["authPrivKey"]
    with pytest.raises(MalformedSnapshot):
        CosignerContext.from_json(snapshot)
    with pytest.raises(MalformedSnapshot):
        CosignerContext.from_json([])


def test_from_json_rejects_invalid_scalar():
    snapshot = _context().to_json()
    snapshot["joinPrivKey"] = "00" * 32
    with pytest.raises(InvalidKeyMaterial):
        CosignerContext.from_json(snapshot)


def test_concurrent_access_returns_one_value():
    ctx = _context()
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: ctx.join_signature, range(32)))
    assert all(result is results[0] for result in results)


def test_display():
    ctx = _context()
    text = str(ctx)
    assert text.startswith("<CosignerContext")
    assert "name=alice" in text
    assert "walletName=shared-wallet" in text
    assert "network=main" in text
    assert f"xpub={ctx.xpub}" in text
    assert f"fingerPrint={GOLDEN_FINGERPRINT}" in text
    assert "cosigner=Cosigner(" in text

    assert "unavailable" in str(_context(walletName=""))
    assert ctx.master.xprivkey() not in repr(ctx)
