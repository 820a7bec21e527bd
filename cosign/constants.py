"""Constants and network parameters for cosign."""

from enum import Enum
from typing import Union

__all__ = [
    "Network",
    "SECP256K1_ORDER",
    "HARDENED_OFFSET",
    "DEFAULT_PURPOSE",
    "DEFAULT_COIN_TYPE",
    "DEFAULT_ACCOUNT",
    "PROOF_INDEX",
    "NULL_TOKEN",
    "TOKEN_SIZE",
    "JOIN_MESSAGE",
    "PROPOSAL_MESSAGE",
    "MESSAGE_MAGIC",
    "COMPACT_HEADER_COMPRESSED",
    "EXTENDED_KEY_SIZE",
]

# secp256k1 curve order
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

HARDENED_OFFSET = 0x80000000

# BIP44 account path: purpose'/coin_type'/account'
DEFAULT_PURPOSE = 44
DEFAULT_COIN_TYPE = 0
DEFAULT_ACCOUNT = 0

# Non-hardened child of the account key reserved for the xpub proof.
# Proof key path: account/PROOF_INDEX/0
PROOF_INDEX = 0x7FFFFFFF

TOKEN_SIZE = 32
NULL_TOKEN = b"\x00" * TOKEN_SIZE

# Hash domain tags
JOIN_MESSAGE = "multisig-join"
PROPOSAL_MESSAGE = "multisig-proposal"

# Bitcoin message magic
MESSAGE_MAGIC = b"\x18Bitcoin Signed Message:\n"

# BIP-137 header base for P2PKH compressed keys (31..34)
COMPACT_HEADER_COMPRESSED = 31

# version(4) depth(1) parent(4) index(4) chain code(32) key(33)
EXTENDED_KEY_SIZE = 78


class Network(str, Enum):
    """Supported networks, keyed by their string tag."""

    MAINNET = "main"
    TESTNET = "testnet"
    REGTEST = "regtest"
    SIMNET = "simnet"

    @property
    def xprv_version(self) -> int:
        """BIP32 version bytes for extended private keys."""
        return _XPRV_VERSIONS[self]

    @property
    def xpub_version(self) -> int:
        """BIP32 version bytes for extended public keys."""
        return _XPUB_VERSIONS[self]

    @classmethod
    def get(cls, value: Union["Network", str]) -> "Network":
        """
        Resolve a network from an enum member or string tag.

        Args:
            value: Network member or tag such as "main" or "testnet"

        Returns:
            Network member

        Raises:
            ValueError: If the tag is unknown
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            tag = value.lower()
            if tag in _ALIASES:
                return _ALIASES[tag]
            return cls(tag)
        raise ValueError(f"Unknown network: {value!r}")

    @classmethod
    def from_xprv_version(cls, version: int) -> "Network":
        """Find the first network whose xprv version matches."""
        for network in cls:
            if network.xprv_version == version:
                return network
        raise ValueError(f"Unknown extended private key version: {version:#010x}")

    @classmethod
    def from_xpub_version(cls, version: int) -> "Network":
        """Find the first network whose xpub version matches."""
        for network in cls:
            if network.xpub_version == version:
                return network
        raise ValueError(f"Unknown extended public key version: {version:#010x}")

    def __str__(self) -> str:
        return self.value


_XPRV_VERSIONS = {
    Network.MAINNET: 0x0488ADE4,
    Network.TESTNET: 0x04358394,
    Network.REGTEST: 0x04358394,
    Network.SIMNET: 0x0420B900,
}

_XPUB_VERSIONS = {
    Network.MAINNET: 0x0488B21E,
    Network.TESTNET: 0x043587CF,
    Network.REGTEST: 0x043587CF,
    Network.SIMNET: 0x0420BD3A,
}

_ALIASES = {
    "mainnet": Network.MAINNET,
    "test": Network.TESTNET,
}
