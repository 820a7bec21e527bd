"""Typed construction options for CosignerContext."""

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional, Union

from .constants import NULL_TOKEN, Network
from .crypto.hd import HDNode
from .exceptions import InvalidConfiguration, InvalidKeyMaterial, ValidationError
from .utils.validation import validate_bytes, validate_name, validate_private_key, validate_token

__all__ = ["ContextOptions"]

# Option bag spellings accepted by ContextOptions.from_dict
_OPTION_ALIASES = {
    "name": "name",
    "walletName": "wallet_name",
    "wallet_name": "wallet_name",
    "token": "token",
    "data": "data",
    "network": "network",
    "master": "master",
    "joinPrivKey": "join_private_key",
    "joinPrivateKey": "join_private_key",
    "join_private_key": "join_private_key",
    "authPrivKey": "auth_private_key",
    "authPrivateKey": "auth_private_key",
    "auth_private_key": "auth_private_key",
}


@dataclass
class ContextOptions:
    """
    Options for building a CosignerContext.

    Key fields left as None are generated from a CSPRNG when the context
    is built. Every field is validated on construction.

    Raises:
        InvalidConfiguration: If a field has the wrong type or shape
        InvalidKeyMaterial: If a supplied key is not a valid key
    """

    name: str = "cosigner"
    wallet_name: str = ""
    token: bytes = NULL_TOKEN
    data: bytes = b""
    network: Union[Network, str] = Network.MAINNET
    master: Optional[HDNode] = None
    join_private_key: Optional[bytes] = None
    auth_private_key: Optional[bytes] = None

    def __post_init__(self) -> None:
        try:
            self.name = validate_name(self.name, "name")
            self.wallet_name = validate_name(self.wallet_name, "wallet_name")
            self.token = validate_token(self.token)
            self.data = validate_bytes(self.data, "data")
        except ValidationError as e:
            raise InvalidConfiguration(e.message) from e

        try:
            self.network = Network.get(self.network)
        except ValueError as e:
            raise InvalidConfiguration(f"Unknown network: {self.network!r}") from e

        if self.master is not None and not HDNode.is_hd_private_key(self.master):
            raise InvalidKeyMaterial("Bad master key.")

        self.join_private_key = _check_scalar(self.join_private_key, "join_private_key")
        self.auth_private_key = _check_scalar(self.auth_private_key, "auth_private_key")

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> "ContextOptions":
        """
        Build options from a loose option bag.

        Accepts camelCase or snake_case keys. Keys mapped to None keep
        their defaults.
        """
        if not isinstance(options, Mapping):
            raise InvalidConfiguration(f"Options must be a mapping, got {type(options).__name__}")

        return cls(**_canonical_options(options))

    @classmethod
    def coerce(
        cls,
        options: Union["ContextOptions", Mapping[str, Any], None] = None,
        **kwargs: Any
    ) -> "ContextOptions":
        """Normalize options, a mapping, or keyword arguments into ContextOptions."""
        if isinstance(options, cls):
            if kwargs:
                values = _canonical_options({f.name: getattr(options, f.name) for f in fields(cls)})
                values.update(_canonical_options(kwargs))
                return cls(**values)
            return options
        if options is not None and not isinstance(options, Mapping):
            raise InvalidConfiguration(f"Options must be a mapping, got {type(options).__name__}")
        merged = _canonical_options(options or {})
        merged.update(_canonical_options(kwargs))
        return cls(**merged)


def _canonical_options(options: Mapping[str, Any]) -> dict:
    """Map option bag spellings to field names, dropping None values."""
    canonical = {}
    seen = {}
    for key, value in options.items():
        if key not in _OPTION_ALIASES:
            raise InvalidConfiguration(f"Unknown option: {key}")
        field = _OPTION_ALIASES[key]
        if field in seen:
            raise InvalidConfiguration(f"Options {seen[field]} and {key} both set {field}")
        seen[field] = key
        if value is not None:
            canonical[field] = value
    return canonical


def _check_scalar(value: Optional[bytes], field: str) -> Optional[bytes]:
    if value is None:
        return None
    if not isinstance(value, (bytes, bytearray)):
        raise InvalidConfiguration(f"{field} must be bytes, got {type(value).__name__}")
    try:
        return validate_private_key(bytes(value))
    except ValidationError as e:
        raise InvalidKeyMaterial(f"{field} is not a private key: {e.message}") from e
