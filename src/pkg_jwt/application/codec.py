from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Union

from .use_cases.decode import DecodeTokenUseCase
from .use_cases.encode import EncodeTokenUseCase
from ..adapters.pyjwt.codec import JSONSegmentCodec
from ..domain.constants import DEFAULT_ALGORITHM
from ..domain.entities import DecodedToken, EncodedToken, TokenHeader
from ..domain.ports import Clock, SegmentCodec, TokenDecoder, TokenEncoder
from ..domain.secret_sources import KeyMaterial


@dataclass(slots=True)
class JWT:
    """
    Stateful token facade.

    Holds the configuration (algorithm, secret, allow_none, expires,
    not_before) and a mutable `claims` mapping used as the builder for the
    next `encode()`. `decode()` replaces claims/algorithm/expires/not_before
    with what the token carried.

    Not safe for concurrent use: keep one instance per logical token or
    serialize access externally. The immutable result of the last
    operation is available as `last_result`.
    """

    algorithm: Optional[str] = DEFAULT_ALGORITHM
    allow_none: bool = False
    claims: Dict[str, Any] = field(default_factory=dict)
    secret: Optional[KeyMaterial] = ""
    expires: Optional[int | float] = None
    not_before: Optional[int | float] = None

    # decode-time hardening / testing hooks
    algorithms: Optional[Sequence[str]] = None
    leeway: int | float = 0
    clock: Clock = time.time
    codec: SegmentCodec = field(default_factory=JSONSegmentCodec, repr=False)

    _token: Optional[str] = field(default=None, init=False, repr=False)
    _last_result: Union[EncodedToken, DecodedToken, None] = field(
        default=None, init=False, repr=False
    )

    # ------------------------------------------------------------------ #
    # Read-only views
    # ------------------------------------------------------------------ #

    @property
    def header(self) -> Dict[str, Any]:
        return TokenHeader(alg=self.algorithm).to_dict()

    @property
    def token(self) -> Optional[str]:
        """Last token produced by encode() or passed to decode()."""
        return self._token

    @property
    def last_result(self) -> Union[EncodedToken, DecodedToken, None]:
        return self._last_result

    # ------------------------------------------------------------------ #
    # Core operations
    # ------------------------------------------------------------------ #

    def encode(self) -> str:
        """
        Sign the current claims and return the token.

        `expires` / `not_before` are written into claims unless the claims
        already carry `exp` / `nbf`.
        """
        encoder: TokenEncoder = EncodeTokenUseCase(codec=self.codec)
        result = encoder.execute(
            self.claims,
            algorithm=self.algorithm,
            secret=self.secret,
            expires=self.expires,
            not_before=self.not_before,
        )
        self.claims.update(
            {k: result.claims[k] for k in ("exp", "nbf") if k in result.claims}
        )
        self._token = result.token
        self._last_result = result
        return result.token

    def decode(self, token: str, secret: Any = None) -> Dict[str, Any]:
        """
        Verify `token` and return its claims.

        `secret` overrides the stored secret and may be key material, a
        mapping of issuer -> key material, or a callable taking the
        (unverified) claims. The resolved value is stored as `secret`.
        Omitting it uses the stored secret.

        Raises:
            InvalidTokenError subclasses, SecretFormatError
        """
        self._token = token
        self._last_result = None
        self.algorithm = None
        self.claims = {}
        self.expires = None
        self.not_before = None

        if secret is None:
            secret = self.secret

        decoder: TokenDecoder = DecodeTokenUseCase(
            codec=self.codec,
            allow_none=self.allow_none,
            algorithms=self.algorithms,
            leeway=self.leeway,
            clock=self.clock,
            on_secret_resolved=self._store_secret,
        )
        result = decoder.execute(token, secret)

        self.algorithm = result.algorithm.name
        self.expires = result.expires
        self.not_before = result.not_before
        self.claims = result.to_dict()
        self._last_result = result
        return self.claims

    def _store_secret(self, secret: Optional[KeyMaterial]) -> None:
        self.secret = secret
