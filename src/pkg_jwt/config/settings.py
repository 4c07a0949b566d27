from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..domain.constants import DEFAULT_ALGORITHM, AlgorithmFamily
from ..domain.secret_sources import KeyMaterial
from ..domain.value_objects import Algorithm


@dataclass(slots=True)
class JWTSettings:
    """
    Token signing / verification settings.

    Host code decides how to construct this (env, config file, etc.).
    For RSA, `secret` is the private key (signing) and `public_key` the
    public key (verifying); for HMAC both directions use `secret`.
    """
    algorithm: str = DEFAULT_ALGORITHM
    secret: Optional[KeyMaterial] = ""
    public_key: Optional[KeyMaterial] = None
    allow_none: bool = False

    # Decode hardening
    algorithms: Optional[Tuple[str, ...]] = None
    leeway: int = 0

    # Relative lifetimes applied on encode (seconds from now)
    expires_in: Optional[int] = None
    not_before_in: Optional[int] = None

    @property
    def parsed_algorithm(self) -> Algorithm:
        return Algorithm.parse(self.algorithm)

    @property
    def signing_key(self) -> Optional[KeyMaterial]:
        return self.secret

    @property
    def verification_family(self) -> AlgorithmFamily:
        """
        Family the verifier expects: the pinned one when every pinned
        algorithm shares it, otherwise the family of `algorithm`.
        """
        if self.algorithms:
            families = {Algorithm.parse(name).family for name in self.algorithms}
            if len(families) == 1:
                return families.pop()
        return self.parsed_algorithm.family

    @property
    def verification_key(self) -> Optional[KeyMaterial]:
        if self.verification_family is AlgorithmFamily.RSA and self.public_key is not None:
            return self.public_key
        return self.secret
