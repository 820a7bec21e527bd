"""Hierarchical Deterministic key derivation (BIP32) for cosign."""

import hmac
import hashlib
import secrets
from typing import Optional

from ..constants import (
    EXTENDED_KEY_SIZE,
    HARDENED_OFFSET,
    SECP256K1_ORDER as N,
    Network,
)
from ..crypto.keys import PrivateKey, PublicKey
from ..exceptions import CryptoError, ValidationError
from ..types.common import ExtendedKeyStr, Fingerprint
from ..utils.encoding import decode_base58_check, encode_base58_check, hash160
from ..utils.validation import validate_private_key

__all__ = ["HDNode"]


class HDNode:
    """HD wallet node (BIP32)."""

    def __init__(
        self,
        private_key: Optional[bytes],
        public_key: bytes,
        chain_code: bytes,
        depth: int = 0,
        parent_fingerprint: bytes = b'\x00\x00\x00\x00',
        index: int = 0,
        network: Network = Network.MAINNET
    ):
        self.private_key = private_key
        self.public_key = public_key
        self.chain_code = chain_code
        self.depth = depth
        self.parent_fingerprint = parent_fingerprint
        self.index = index
        self.network = network

    @classmethod
    def from_seed(cls, seed: bytes, network: Network = Network.MAINNET) -> "HDNode":
        """Create master node from seed."""
        if len(seed) < 16 or len(seed) > 64:
            raise ValueError("Seed must be between 16 and 64 bytes")

        h = hmac.new(b"Bitcoin seed", seed, hashlib.sha512).digest()

        private_key_bytes = h[:32]
        chain_code = h[32:]

        key_int = int.from_bytes(private_key_bytes, 'big')
        if key_int == 0 or key_int >= N:
            raise CryptoError("Invalid master key")

        private_key = PrivateKey(private_key_bytes)
        public_key = private_key.public_key(compressed=True).point

        return cls(
            private_key=private_key_bytes,
            public_key=public_key,
            chain_code=chain_code,
            network=network
        )

    @classmethod
    def generate(cls, network: Network = Network.MAINNET) -> "HDNode":
        """Create master node from 32 bytes of CSPRNG entropy."""
        while True:
            try:
                return cls.from_seed(secrets.token_bytes(32), network)
            except CryptoError:
                # Seed hashed outside the curve order, try again
                continue

    @staticmethod
    def is_hd_private_key(obj: object) -> bool:
        """Check that obj is an HDNode carrying a valid private key."""
        if not isinstance(obj, HDNode) or obj.private_key is None:
            return False
        try:
            validate_private_key(obj.private_key)
        except ValidationError:
            return False
        return (
            len(obj.chain_code) == 32
            and len(obj.parent_fingerprint) == 4
            and 0 <= obj.depth <= 0xff
            and 0 <= obj.index <= 0xffffffff
        )

    @property
    def is_private(self) -> bool:
        return self.private_key is not None

    @property
    def identifier(self) -> bytes:
        """HASH160 of the compressed public key."""
        return hash160(self.public_key)

    @property
    def fingerprint(self) -> Fingerprint:
        """First 4 bytes of the identifier as a big-endian integer."""
        return Fingerprint(int.from_bytes(self.identifier[:4], 'big'))

    def derive(self, index: int, hardened: bool = False) -> "HDNode":
        """Derive child node."""
        if hardened:
            index |= HARDENED_OFFSET

        if index < 0 or index > 0xffffffff:
            raise CryptoError(f"Child index out of range: {index}")

        if index >= HARDENED_OFFSET:
            if self.private_key is None:
                raise CryptoError("Cannot do hardened derivation without private key")
            data = b'\x00' + self.private_key + index.to_bytes(4, 'big')
        else:
            data = self.public_key + index.to_bytes(4, 'big')

        h = hmac.new(self.chain_code, data, hashlib.sha512).digest()

        child_chain_code = h[32:]
        child_key_int = int.from_bytes(h[:32], 'big')

        # Invalid child per BIP32, skip to the next index
        if child_key_int >= N:
            return self.derive(index + 1)

        if self.private_key:
            parent_key_int = int.from_bytes(self.private_key, 'big')
            child_private_int = (parent_key_int + child_key_int) % N

            if child_private_int == 0:
                return self.derive(index + 1)

            child_private_key = child_private_int.to_bytes(32, 'big')
            child_public_key = PrivateKey(child_private_key).public_key(compressed=True).point
        else:
            child_private_key = None
            try:
                child_public_key = PublicKey(self.public_key).tweak_add(h[:32]).point
            except CryptoError:
                return self.derive(index + 1)

        parent_fingerprint = hash160(self.public_key)[:4]

        return HDNode(
            private_key=child_private_key,
            public_key=child_public_key,
            chain_code=child_chain_code,
            depth=self.depth + 1,
            parent_fingerprint=parent_fingerprint,
            index=index,
            network=self.network
        )

    def derive_path(self, path: str) -> "HDNode":
        """Derive using BIP32 path like m/44'/0'/0'/0/0."""
        if not path or path in ('m', 'M'):
            return self

        if path.startswith('m/') or path.startswith('M/'):
            path = path[2:]

        node = self
        for component in path.split('/'):
            if not component:
                continue

            hardened = component.endswith("'") or component.endswith("h")
            if hardened:
                component = component[:-1]

            try:
                index = int(component)
            except ValueError as e:
                raise CryptoError(f"Invalid path component: {component!r}") from e
            if index < 0 or index >= HARDENED_OFFSET:
                raise CryptoError(f"Path index out of range: {index}")

            node = node.derive(index, hardened=hardened)

        return node

    def derive_account(self, purpose: int, coin_type: int, account: int) -> "HDNode":
        """Derive the BIP44 account node purpose'/coin_type'/account'."""
        if self.private_key is None:
            raise CryptoError("Cannot derive account from a public-only node")
        return self.derive_path(f"m/{purpose}'/{coin_type}'/{account}'")

    def to_public(self) -> "HDNode":
        """Return a copy of this node with the private key stripped."""
        return HDNode(
            private_key=None,
            public_key=self.public_key,
            chain_code=self.chain_code,
            depth=self.depth,
            parent_fingerprint=self.parent_fingerprint,
            index=self.index,
            network=self.network
        )

    def get_private_key(self) -> PrivateKey:
        """Get private key object."""
        if self.private_key is None:
            raise ValueError("This is a public-only node")
        return PrivateKey(self.private_key)

    def get_public_key(self) -> PublicKey:
        """Get public key object."""
        return PublicKey(self.public_key)

    def _serialize(self, version: int, key_data: bytes) -> ExtendedKeyStr:
        data = (
            version.to_bytes(4, 'big')
            + bytes([self.depth])
            + self.parent_fingerprint
            + self.index.to_bytes(4, 'big')
            + self.chain_code
            + key_data
        )
        return ExtendedKeyStr(encode_base58_check(data))

    def xprivkey(self, network: Optional[Network] = None) -> ExtendedKeyStr:
        """Encode as an extended private key for the given network."""
        if self.private_key is None:
            raise CryptoError("Cannot export xprv from a public-only node")
        network = Network.get(network or self.network)
        return self._serialize(network.xprv_version, b'\x00' + self.private_key)

    def xpubkey(self, network: Optional[Network] = None) -> ExtendedKeyStr:
        """Encode as an extended public key for the given network."""
        network = Network.get(network or self.network)
        return self._serialize(network.xpub_version, self.public_key)

    @classmethod
    def from_base58(cls, string: str, network: Optional[Network] = None) -> "HDNode":
        """
        Decode an extended private or public key.

        Args:
            string: Base58Check extended key
            network: Expected network; any known network if None

        Returns:
            HDNode (private if the version is an xprv version)

        Raises:
            ValidationError: If the key is structurally invalid
        """
        data = decode_base58_check(string)
        if len(data) != EXTENDED_KEY_SIZE:
            raise ValidationError(
                f"Extended key must be {EXTENDED_KEY_SIZE} bytes, got {len(data)}"
            )

        version = int.from_bytes(data[0:4], 'big')
        depth = data[4]
        parent_fingerprint = data[5:9]
        index = int.from_bytes(data[9:13], 'big')
        chain_code = data[13:45]
        key_data = data[45:78]

        if network is not None:
            network = Network.get(network)
            if version == network.xprv_version:
                private = True
            elif version == network.xpub_version:
                private = False
            else:
                raise ValidationError(
                    f"Extended key version {version:#010x} does not match network {network}"
                )
        else:
            try:
                network = Network.from_xprv_version(version)
                private = True
            except ValueError:
                try:
                    network = Network.from_xpub_version(version)
                    private = False
                except ValueError as e:
                    raise ValidationError(str(e)) from e

        if depth == 0 and (parent_fingerprint != b'\x00\x00\x00\x00' or index != 0):
            raise ValidationError("Master key with non-zero parent fingerprint or index")

        if private:
            if key_data[0] != 0:
                raise ValidationError("Extended private key must be zero-padded")
            private_key = validate_private_key(key_data[1:])
            public_key = PrivateKey(private_key).public_key(compressed=True).point
        else:
            private_key = None
            public_key = PublicKey(key_data).point

        return cls(
            private_key=private_key,
            public_key=public_key,
            chain_code=chain_code,
            depth=depth,
            parent_fingerprint=parent_fingerprint,
            index=index,
            network=network
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HDNode):
            return False
        return (
            self.private_key == other.private_key
            and self.public_key == other.public_key
            and self.chain_code == other.chain_code
            and self.depth == other.depth
            and self.parent_fingerprint == other.parent_fingerprint
            and self.index == other.index
        )

    def __hash__(self) -> int:
        return hash((self.public_key, self.chain_code, self.depth, self.index))

    def __repr__(self) -> str:
        kind = "private" if self.private_key is not None else "public"
        return f"HDNode({kind}, depth={self.depth}, fingerprint={self.fingerprint:08x})"
