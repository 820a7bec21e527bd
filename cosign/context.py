"""Cosigner identity context.

A CosignerContext owns one participant's key material for a multisig
wallet: a BIP32 master key with its BIP44 account, an authorization
keypair that signs proposals, and a join keypair that signs the join
proof. Proofs bound to the wallet name and cosigner name are computed
lazily and cached until refresh().
"""

import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from .api_types import ContextSnapshot, JoinRequest
from .constants import (
    DEFAULT_ACCOUNT,
    DEFAULT_COIN_TYPE,
    DEFAULT_PURPOSE,
    Network,
)
from .cosigner import Cosigner
from .crypto.hd import HDNode
from .crypto.keys import PrivateKey
from .crypto.proof import derive_proof_key, derive_proof_node, get_join_hash, get_proposal_hash
from .crypto.signature import sign_hash
from .exceptions import (
    InvalidConfiguration,
    MalformedSnapshot,
    MissingIdentityField,
    ValidationError,
)
from .options import ContextOptions
from .types.common import ExtendedKeyStr, Fingerprint, PublicKeyBytes, Signature
from .utils.encoding import hex_to_bytes

__all__ = ["CosignerContext"]

logger = logging.getLogger(__name__)

_SNAPSHOT_FIELDS = (
    "name",
    "walletName",
    "token",
    "data",
    "network",
    "master",
    "joinPrivKey",
    "authPrivKey",
    "fingerPrint",
)


@dataclass
class _ProofCache:
    """Memoized proof values; cleared together by refresh()."""

    join_hash: Optional[bytes] = None
    join_signature: Optional[Signature] = None
    xpub_proof: Optional[Signature] = None
    cosigner: Optional[Cosigner] = None


class CosignerContext:
    """
    Cryptographic identity of a single cosigner.

    Example:
        >>> ctx = CosignerContext(name="alice", wallet_name="shared-wallet")
        >>> request = ctx.to_http_options()
        >>> sig = ctx.sign_proposal(ProposalPayloadType.CREATE, {"memo": "rent"})
    """

    purpose = DEFAULT_PURPOSE

    def __init__(
        self,
        options: Union[ContextOptions, Mapping[str, Any], None] = None,
        **kwargs: Any
    ) -> None:
        """
        Build a context, generating any key material not supplied.

        Args:
            options: ContextOptions or an option bag (camelCase or snake_case)
            **kwargs: Individual options, merged over options

        Raises:
            InvalidConfiguration: If an option has the wrong type or shape
            InvalidKeyMaterial: If a supplied key is invalid
        """
        opts = ContextOptions.coerce(options, **kwargs)

        self.network: Network = opts.network
        self.name: str = opts.name
        self.wallet_name: str = opts.wallet_name
        self.token: bytes = opts.token
        self.data: bytes = opts.data

        self.master: HDNode = opts.master if opts.master is not None else HDNode.generate(self.network)
        self.join_private_key: bytes = (
            opts.join_private_key if opts.join_private_key is not None
            else PrivateKey.create().secret
        )
        self.auth_private_key: bytes = (
            opts.auth_private_key if opts.auth_private_key is not None
            else PrivateKey.create().secret
        )

        self.join_public_key: Optional[PublicKeyBytes] = None
        self.auth_public_key: Optional[PublicKeyBytes] = None
        self.account_private_key: Optional[HDNode] = None
        self.account_key: Optional[HDNode] = None
        self.fingerprint: Fingerprint = Fingerprint(0)

        self._lock = threading.RLock()
        self._cache = _ProofCache()

        self.init()

        self._logger = logging.getLogger(f"{__name__}.CosignerContext.{self.fingerprint:08x}")
        self._logger.debug(f"Created cosigner context {self.name!r} on {self.network}")

    @classmethod
    def create(cls, options: Union[ContextOptions, Mapping[str, Any], None] = None) -> "CosignerContext":
        """Build a context from options."""
        return cls(options)

    @classmethod
    def from_options(cls, options: Union[ContextOptions, Mapping[str, Any], None] = None) -> "CosignerContext":
        """Alias of create()."""
        return cls(options)

    def init(self) -> None:
        """
        Derive public keys, fingerprint and the account key from private material.

        The account nodes carry the context network, so the cosigner
        record encodes and verifies under the same network as xpub.
        """
        self.join_public_key = PrivateKey(self.join_private_key).public_key(compressed=True).point
        self.auth_public_key = PrivateKey(self.auth_private_key).public_key(compressed=True).point

        self.fingerprint = self.master.fingerprint
        self.account_private_key = self.master.derive_account(
            self.purpose, DEFAULT_COIN_TYPE, DEFAULT_ACCOUNT
        )
        self.account_private_key.network = self.network
        self.account_key = self.account_private_key.to_public()

    @property
    def xpub(self) -> ExtendedKeyStr:
        """Account extended public key for this context's network."""
        return self.account_key.xpubkey(self.network)

    @property
    def proof_public_key(self) -> PublicKeyBytes:
        """Public half of the key that signs xpub_proof."""
        return derive_proof_node(self.account_key).get_public_key().point

    def _require_proof_fields(self) -> None:
        if not self.name:
            raise MissingIdentityField("name")
        if not self.wallet_name:
            raise MissingIdentityField("wallet_name")
        if self.account_key is None:
            raise MissingIdentityField("account_key")
        if self.auth_public_key is None:
            raise MissingIdentityField("auth_public_key")
        if self.join_private_key is None:
            raise MissingIdentityField("join_private_key")

    @property
    def join_hash(self) -> bytes:
        """Digest binding wallet name, cosigner name, auth key and account key."""
        with self._lock:
            if self._cache.join_hash is None:
                self._require_proof_fields()
                self._cache.join_hash = get_join_hash(
                    self.wallet_name,
                    self.name,
                    self.auth_public_key,
                    self.account_key,
                    self.network,
                )
            return self._cache.join_hash

    @property
    def join_signature(self) -> Signature:
        """join_hash signed with the join private key."""
        with self._lock:
            if self._cache.join_signature is None:
                self._require_proof_fields()
                self._cache.join_signature = sign_hash(self.join_hash, self.join_private_key)
            return self._cache.join_signature

    @property
    def xpub_proof(self) -> Signature:
        """join_hash signed with the account proof key (account/PROOF_INDEX/0)."""
        with self._lock:
            if self._cache.xpub_proof is None:
                self._require_proof_fields()
                proof_key = derive_proof_key(self.account_private_key)
                self._cache.xpub_proof = sign_hash(self.join_hash, proof_key)
            return self._cache.xpub_proof

    def sign_proposal(self, payload_type: int, payload: Any) -> Signature:
        """
        Sign a proposal message with the authorization key.

        Args:
            payload_type: 8-bit ProposalPayloadType tag
            payload: String, or object encoded as canonical JSON

        Returns:
            65-byte compact signature

        Raises:
            InvalidConfiguration: If type or payload cannot be encoded
            MissingIdentityField: If wallet_name is empty
        """
        if not self.wallet_name:
            raise MissingIdentityField("wallet_name")

        try:
            proposal_hash = get_proposal_hash(self.wallet_name, payload_type, payload)
        except ValidationError as e:
            raise InvalidConfiguration(e.message) from e

        return sign_hash(proposal_hash, self.auth_private_key)

    def to_cosigner(self) -> Cosigner:
        """Public cosigner record, cached with the proofs."""
        with self._lock:
            if self._cache.cosigner is None:
                self._cache.cosigner = Cosigner(
                    name=self.name,
                    account_key=self.account_key,
                    auth_public_key=self.auth_public_key,
                    join_signature=self.join_signature,
                    fingerprint=self.fingerprint,
                    token=self.token,
                    purpose=self.purpose,
                )
            return self._cache.cosigner

    def to_http_options(self) -> JoinRequest:
        """Body of a wallet join request."""
        return {
            "cosigner": {
                "name": self.name,
                "purpose": self.purpose,
                "fingerPrint": self.fingerprint,
                "data": self.data.hex(),
                "token": self.token.hex(),
                "accountKey": self.xpub,
                "accountKeyProof": self.xpub_proof.hex(),
                "authPubKey": self.auth_public_key.hex(),
            },
            "joinSignature": self.join_signature.hex(),
        }

    def refresh(self) -> None:
        """Drop cached proofs so they are recomputed on next access."""
        with self._lock:
            self._cache = _ProofCache()
        self._logger.debug("Cleared cached proofs")

    def to_json(self) -> ContextSnapshot:
        """Snapshot of private state; restore with from_json."""
        return {
            "name": self.name,
            "walletName": self.wallet_name,
            "token": self.token.hex(),
            "data": self.data.hex(),
            "network": str(self.network),
            "master": self.master.xprivkey(self.network),
            "joinPrivKey": self.join_private_key.hex(),
            "authPrivKey": self.auth_private_key.hex(),
            "fingerPrint": self.fingerprint,
        }

    @classmethod
    def from_json(cls, json_obj: Mapping[str, Any]) -> "CosignerContext":
        """
        Restore a context from to_json output.

        Public values are rederived from private material. The stored
        fingerprint must match the one recomputed from master.

        Raises:
            MalformedSnapshot: If fields are missing, mistyped or inconsistent
            InvalidKeyMaterial: If a stored private key is out of range
        """
        if not isinstance(json_obj, Mapping):
            raise MalformedSnapshot(f"Snapshot must be an object, got {type(json_obj).__name__}")

        missing = [key for key in _SNAPSHOT_FIELDS if key not in json_obj]
        if missing:
            raise MalformedSnapshot(f"Snapshot is missing fields: {', '.join(missing)}")

        fingerprint = json_obj["fingerPrint"]
        if isinstance(fingerprint, bool) or not isinstance(fingerprint, int):
            raise MalformedSnapshot("fingerPrint must be an integer")

        try:
            network = Network.get(json_obj["network"])
        except ValueError as e:
            raise MalformedSnapshot(f"Unknown network: {json_obj['network']!r}") from e

        try:
            master = HDNode.from_base58(json_obj["master"], network)
        except ValidationError as e:
            raise MalformedSnapshot(f"Bad master key: {e.message}") from e
        if master.private_key is None:
            raise MalformedSnapshot("Snapshot master must be an extended private key")

        try:
            token = hex_to_bytes(json_obj["token"])
            data = hex_to_bytes(json_obj["data"])
            join_private_key = hex_to_bytes(json_obj["joinPrivKey"])
            auth_private_key = hex_to_bytes(json_obj["authPrivKey"])
        except ValidationError as e:
            raise MalformedSnapshot(e.message) from e

        try:
            options = ContextOptions(
                name=json_obj["name"],
                wallet_name=json_obj["walletName"],
                token=token,
                data=data,
                network=network,
                master=master,
                join_private_key=join_private_key,
                auth_private_key=auth_private_key,
            )
        except InvalidConfiguration as e:
            raise MalformedSnapshot(e.message) from e

        ctx = cls(options)

        if ctx.fingerprint != fingerprint:
            logger.warning(f"Rejected snapshot for {ctx.name!r}: fingerprint mismatch")
            raise MalformedSnapshot(
                f"Fingerprint mismatch: snapshot has {fingerprint}, master gives {ctx.fingerprint}"
            )

        ctx._logger.debug(f"Restored cosigner context {ctx.name!r} from snapshot")
        return ctx

    def to_json_string(self) -> str:
        return json.dumps(self.to_json())

    @classmethod
    def from_json_string(cls, raw: str) -> "CosignerContext":
        try:
            obj = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise MalformedSnapshot(f"Snapshot is not valid JSON: {e}") from e
        return cls.from_json(obj)

    def __str__(self) -> str:
        try:
            cosigner = repr(self.to_cosigner())
        except MissingIdentityField as e:
            cosigner = f"<unavailable: {e.field} not set>"

        return (
            "<CosignerContext\n"
            f"  name={self.name}\n"
            f"  walletName={self.wallet_name}\n"
            f"  network={self.network}\n"
            f"  master={self.master.xprivkey(self.network)}\n"
            f"  token={self.token.hex()}\n"
            f"  fingerPrint={self.fingerprint}\n"
            f"  purpose={self.purpose}\n"
            f"  xpub={self.xpub}\n"
            f"  authPubKey={self.auth_public_key.hex()}\n"
            f"  joinPubKey={self.join_public_key.hex()}\n"
            f"  cosigner={cosigner}\n"
            "/>"
        )

    def __repr__(self) -> str:
        return (
            f"CosignerContext(name={self.name!r}, wallet_name={self.wallet_name!r}, "
            f"network={self.network}, fingerprint={self.fingerprint:08x})"
        )
