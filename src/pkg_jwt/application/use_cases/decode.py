from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple

from ...adapters.pyjwt.codec import JSONSegmentCodec
from ...adapters.pyjwt.signers import signer_for
from ...domain.constants import TOKEN_TYPE
from ...domain.entities import DecodedToken
from ...domain.exceptions import (
    AlgorithmNotAllowedError,
    InvalidTokenError,
    InvalidTypeError,
    MalformedTokenError,
    MissingAlgorithmError,
    NoneAlgorithmProhibitedError,
    SignatureVerificationError,
    TokenExpiredError,
    TokenNotYetValidError,
    UnknownAlgorithmError,
    UnsupportedHashStrengthError,
)
from ...domain.ports import Clock, SegmentCodec
from ...domain.secret_sources import KeyMaterial, secret_source_from_argument
from ...domain.value_objects import Algorithm

logger = logging.getLogger(__name__)


def _number_claim(claims: Mapping[str, Any], name: str) -> Optional[int | float]:
    value = claims.get(name)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedTokenError(f"Claim {name!r} must be a number")
    if isinstance(value, float) and not math.isfinite(value):
        raise MalformedTokenError(f"Claim {name!r} must be finite")
    return value


@dataclass(slots=True)
class DecodeTokenUseCase:
    """
    Application use case: raw token -> verified DecodedToken.

    Steps, each one terminal on failure:
      1. split into exactly three segments
      2. base64url + JSON decode header and claims
      3. header `typ` must be JWT, header `alg` must be present
      4. resolve the secret (literal, issuer map or callback)
      5. verify the signature with the header's algorithm
      6. check `exp` and `nbf` against the clock

    `algorithms` pins the accepted algorithm names. Left as None, any
    algorithm the header names is accepted (subject to allow_none), so
    callers that know which family they expect should pin it.
    """

    codec: SegmentCodec = field(default_factory=JSONSegmentCodec)
    allow_none: bool = False
    algorithms: Optional[Iterable[str]] = None
    leeway: int | float = 0
    clock: Clock = time.time
    on_secret_resolved: Optional[Callable[[Optional[KeyMaterial]], None]] = None

    def __post_init__(self) -> None:
        if self.algorithms is not None:
            self.algorithms = _normalize_algorithms(self.algorithms)

    def execute(self, token: str, secret: Any) -> DecodedToken:
        """
        Decode and verify a token.

        `secret` may be key material, a mapping of issuer -> key material,
        or a callable receiving the unverified claims.

        Raises:
            MalformedTokenError
            InvalidTypeError / MissingAlgorithmError
            UnknownAlgorithmError (also for HS<n>/RS<n> with no hash function)
            AlgorithmNotAllowedError / NoneAlgorithmProhibitedError
            SignatureVerificationError
            TokenExpiredError / TokenNotYetValidError
            SecretFormatError
        """
        try:
            return self._decode(token, secret)
        except InvalidTokenError as exc:
            logger.info("Token rejected (%s): %s", type(exc).__name__, exc)
            raise

    # ------------------------------------------------------------------ #
    # Internal: pipeline
    # ------------------------------------------------------------------ #

    def _decode(self, token: str, secret: Any) -> DecodedToken:
        token = self._as_text(token)
        header_segment, claims_segment, signature_segment = self._split(token)

        header = self.codec.decode_segment(header_segment)
        claims = self.codec.decode_segment(claims_segment)

        if header.get("typ") != TOKEN_TYPE:
            raise InvalidTypeError("Not a JWT")

        alg_name = header.get("alg")
        if alg_name is None or alg_name == "":
            raise MissingAlgorithmError('Required header field "alg" not specified')

        key = secret_source_from_argument(secret).resolve(claims)
        if self.on_secret_resolved is not None:
            self.on_secret_resolved(key)

        algorithm = Algorithm.parse(alg_name)
        self._verify_signature(
            algorithm,
            f"{header_segment}.{claims_segment}".encode("ascii"),
            key,
            signature_segment,
        )

        expires, not_before = self._check_times(claims)

        logger.debug("Decoded token with alg=%s", algorithm.name)
        return DecodedToken(
            token=token,
            header=header,
            claims=claims,
            algorithm=algorithm,
            expires=expires,
            not_before=not_before,
        )

    @staticmethod
    def _as_text(token: Any) -> str:
        if isinstance(token, bytes):
            try:
                token = token.decode("ascii")
            except UnicodeDecodeError as exc:
                raise MalformedTokenError("Token must be ASCII") from exc
        if not isinstance(token, str):
            raise MalformedTokenError(f"Token must be a string, not {type(token).__name__}")
        return token

    @staticmethod
    def _split(token: str) -> Tuple[str, str, str]:
        parts = token.split(".")
        if len(parts) != 3:
            raise MalformedTokenError(
                f"Token must have 3 segments, got {len(parts)}"
            )
        header_segment, claims_segment, signature_segment = parts
        return header_segment, claims_segment, signature_segment

    def _verify_signature(
        self,
        algorithm: Algorithm,
        payload: bytes,
        key: Optional[KeyMaterial],
        signature_segment: str,
    ) -> None:
        if algorithm.is_unsigned:
            if not self.allow_none:
                raise NoneAlgorithmProhibitedError('Algorithm "none" is prohibited')
            self._check_pinned(algorithm)
            return

        self._check_pinned(algorithm)

        # resolve the hash function first so HS999 fails before any key use
        try:
            signer = signer_for(algorithm)
        except UnsupportedHashStrengthError as exc:
            raise UnknownAlgorithmError(f"Unknown algorithm: {algorithm.name!r}") from exc
        signature = self.codec.decode_signature(signature_segment)

        if key is None:
            raise SignatureVerificationError(f"No secret available for {algorithm.name}")

        if not signer.verify(payload, key, signature):
            raise SignatureVerificationError(f"Failed {algorithm.family.value} validation")

    def _check_pinned(self, algorithm: Algorithm) -> None:
        if self.algorithms is not None and algorithm.name not in self.algorithms:
            raise AlgorithmNotAllowedError(
                f"Algorithm {algorithm.name!r} not allowed, expected one of {list(self.algorithms)}"
            )

    def _check_times(self, claims: Mapping[str, Any]) -> Tuple[Optional[int | float], Optional[int | float]]:
        now = self.clock()

        expires = _number_claim(claims, "exp")
        if expires is not None and now > expires + self.leeway:
            raise TokenExpiredError("JWT has expired")

        not_before = _number_claim(claims, "nbf")
        if not_before is not None and now < not_before - self.leeway:
            raise TokenNotYetValidError("JWT is not yet valid")

        return expires, not_before


def _normalize_algorithms(algorithms: Iterable[str]) -> Tuple[str, ...]:
    """
    Validate an allow-list against the algorithm grammar.
    A plain string is treated as a single-element list.
    """
    if isinstance(algorithms, str):
        algorithms = (algorithms,)
    return tuple(Algorithm.parse(name).name for name in algorithms)
