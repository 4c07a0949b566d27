from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Union

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from .exceptions import SecretFormatError

KeyMaterial = Union[str, bytes, RSAPrivateKey, RSAPublicKey]
SecretCallbackFunc = Callable[[Mapping[str, Any]], Optional[KeyMaterial]]

_KEY_MATERIAL_TYPES = (str, bytes, RSAPrivateKey, RSAPublicKey)


def is_key_material(value: Any) -> bool:
    return isinstance(value, _KEY_MATERIAL_TYPES)


@dataclass(frozen=True, slots=True)
class LiteralSecret:
    """A shared secret or PEM/key object used as-is."""
    value: Optional[KeyMaterial]

    def resolve(self, claims: Mapping[str, Any]) -> Optional[KeyMaterial]:
        return self.value


@dataclass(frozen=True, slots=True)
class IssuerSecretMap:
    """
    Secrets keyed by the `iss` claim.

    A missing issuer resolves to None, which never verifies.
    """
    secrets: Mapping[str, Any]

    def resolve(self, claims: Mapping[str, Any]) -> Optional[KeyMaterial]:
        issuer = claims.get("iss")
        if not isinstance(issuer, str):
            issuer = ""
        return _checked(self.secrets.get(issuer), source="issuer map")


@dataclass(frozen=True, slots=True)
class SecretCallback:
    """
    Secret computed from the claims by a user callback.

    The callback sees claims whose signature has NOT been verified yet; it
    may use them to pick a key but must not trust them for anything else.
    """
    func: SecretCallbackFunc

    def resolve(self, claims: Mapping[str, Any]) -> Optional[KeyMaterial]:
        return _checked(self.func(MappingProxyType(dict(claims))), source="secret callback")


SecretSource = Union[LiteralSecret, IssuerSecretMap, SecretCallback]


def _checked(value: Any, *, source: str) -> Optional[KeyMaterial]:
    if value is None or is_key_material(value):
        return value
    raise SecretFormatError(
        f"{source} returned unsupported secret type {type(value).__name__}"
    )


def secret_source_from_argument(secret: Any) -> SecretSource:
    """
    Classify a decode-time secret argument.

    - None                         -> LiteralSecret(None), never verifies
    - str / bytes / RSA key object -> LiteralSecret
    - Mapping                      -> IssuerSecretMap
    - callable                     -> SecretCallback
    """
    if isinstance(secret, (LiteralSecret, IssuerSecretMap, SecretCallback)):
        return secret
    if secret is None or is_key_material(secret):
        return LiteralSecret(secret)
    if isinstance(secret, Mapping):
        return IssuerSecretMap(secret)
    if callable(secret):
        return SecretCallback(secret)
    raise SecretFormatError(f"Secret not understood: {type(secret).__name__}")
