from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ...adapters.pyjwt.codec import JSONSegmentCodec
from ...adapters.pyjwt.signers import signer_for
from ...domain.entities import EncodedToken, TokenHeader
from ...domain.ports import SegmentCodec
from ...domain.value_objects import Algorithm

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EncodeTokenUseCase:
    """
    Application use case:
    - merge exp / nbf into the claims (caller-set values win)
    - serialize header and claims
    - sign `header.claims` with the configured algorithm

    Encoding with `none` is always permitted here; only decoding is
    gated by allow_none.
    """

    codec: SegmentCodec = field(default_factory=JSONSegmentCodec)

    def execute(
        self,
        claims: Mapping[str, Any],
        *,
        algorithm: str,
        secret: Any,
        expires: Optional[int] = None,
        not_before: Optional[int] = None,
    ) -> EncodedToken:
        """
        Build a signed token from claims.

        Raises:
            UnknownAlgorithmError
            SigningError / UnsupportedHashStrengthError
        """
        parsed = Algorithm.parse(algorithm)

        payload_claims = dict(claims)
        if expires is not None and payload_claims.get("exp") is None:
            payload_claims["exp"] = expires
        if not_before is not None and payload_claims.get("nbf") is None:
            payload_claims["nbf"] = not_before

        header = TokenHeader(alg=algorithm)
        header_segment = self.codec.encode_segment(header.to_dict())
        claims_segment = self.codec.encode_segment(payload_claims)
        payload = f"{header_segment}.{claims_segment}"

        if parsed.is_unsigned:
            logger.warning("Encoding an unsigned token (alg=none)")

        signature = signer_for(parsed).sign(payload.encode("ascii"), secret)
        token = f"{payload}.{self.codec.encode_signature(signature)}"

        logger.debug("Encoded token with alg=%s", parsed.name)
        return EncodedToken(
            token=token,
            header=header,
            claims=payload_claims,
            algorithm=parsed,
        )
