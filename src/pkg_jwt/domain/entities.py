from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .constants import TOKEN_TYPE
from .value_objects import Algorithm


@dataclass(frozen=True, slots=True)
class TokenHeader:
    """
    JOSE header of a token. Only `typ` and `alg` are produced on encode.
    """
    alg: str
    typ: str = TOKEN_TYPE

    def to_dict(self) -> Dict[str, str]:
        return {"typ": self.typ, "alg": self.alg}


@dataclass(frozen=True, slots=True)
class EncodedToken:
    """
    Result of an encode: the serialized token plus what went into it.
    """
    token: str
    header: TokenHeader
    claims: Mapping[str, Any]
    algorithm: Algorithm

    def __post_init__(self) -> None:
        object.__setattr__(self, "claims", MappingProxyType(dict(self.claims)))

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True, slots=True)
class DecodedToken:
    """
    Result of a successful decode.

    Every field here has passed signature and time validation.
    """
    token: str
    header: Mapping[str, Any]
    claims: Mapping[str, Any]
    algorithm: Algorithm
    expires: Optional[int | float] = None
    not_before: Optional[int | float] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "header", MappingProxyType(dict(self.header)))
        object.__setattr__(self, "claims", MappingProxyType(dict(self.claims)))

    # --- Read-only shortcuts for common claims -----------------------------

    @property
    def subject(self) -> Optional[str]:
        return self.claims.get("sub")

    @property
    def issuer(self) -> Optional[str]:
        return self.claims.get("iss")

    def to_dict(self) -> Dict[str, Any]:
        """Mutable copy of the claims."""
        return dict(self.claims)
