# src/pkg_jwt/domain/value_objects.py

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional

from .constants import AlgorithmFamily, UNSIGNED_ALGORITHM
from .exceptions import UnknownAlgorithmError

_SIGNED_ALGORITHM_RE = re.compile(r"(HS|RS)([0-9]{1,9})")


@dataclass(frozen=True, slots=True)
class Algorithm:
    """
    A parsed algorithm identifier.

    The grammar is closed: `none`, `HS<n>` or `RS<n>`. The same parser is
    used for the configured algorithm on encode and for the (untrusted)
    header value on decode.
    """
    name: str
    family: AlgorithmFamily
    strength: Optional[int] = None

    @classmethod
    def parse(cls, name: Any) -> "Algorithm":
        if name == UNSIGNED_ALGORITHM:
            return cls(name=UNSIGNED_ALGORITHM, family=AlgorithmFamily.NONE)

        if not isinstance(name, str):
            raise UnknownAlgorithmError(f"Unknown algorithm: {name!r}")

        # fullmatch: a trailing newline must not slip through
        match = _SIGNED_ALGORITHM_RE.fullmatch(name)
        if match is None:
            raise UnknownAlgorithmError(f"Unknown algorithm: {name!r}")

        prefix, digits = match.groups()
        strength = int(digits)
        if strength <= 0:
            raise UnknownAlgorithmError(f"Unknown algorithm: {name!r}")

        return cls(name=name, family=AlgorithmFamily(prefix), strength=strength)

    @property
    def is_unsigned(self) -> bool:
        return self.family is AlgorithmFamily.NONE

    def __str__(self) -> str:
        return self.name
