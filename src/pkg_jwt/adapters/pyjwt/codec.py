from __future__ import annotations

import binascii
import json
from typing import Any, Mapping

from jwt.utils import base64url_decode, base64url_encode

from ...domain.exceptions import ClaimsEncodingError, MalformedTokenError


def _reject_constant(name: str) -> Any:
    # NaN / Infinity are not JSON
    raise MalformedTokenError(f"Invalid segment JSON: non-standard constant {name}")


class JSONSegmentCodec:
    """
    JSON + unpadded base64url, as used by every segment of a token.

    Implements the SegmentCodec port. Output is compact JSON (no spaces)
    in UTF-8; input padding is optional.
    """

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    def encode_segment(self, data: Mapping[str, Any]) -> str:
        try:
            raw = json.dumps(
                data,
                separators=(",", ":"),
                ensure_ascii=False,
                allow_nan=False,
            ).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise ClaimsEncodingError(f"Claims are not JSON serializable: {exc}") from exc
        return base64url_encode(raw).decode("ascii")

    def decode_segment(self, segment: str) -> dict[str, Any]:
        raw = self._b64decode(segment)
        try:
            value = json.loads(raw.decode("utf-8"), parse_constant=_reject_constant)
        except (UnicodeDecodeError, ValueError) as exc:
            raise MalformedTokenError(f"Invalid segment JSON: {exc}") from exc

        if not isinstance(value, dict):
            raise MalformedTokenError("Invalid segment: expected a JSON object")
        return value

    def encode_signature(self, signature: bytes) -> str:
        return base64url_encode(signature).decode("ascii")

    def decode_signature(self, segment: str) -> bytes:
        return self._b64decode(segment)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _b64decode(segment: str) -> bytes:
        try:
            return base64url_decode(segment.encode("ascii"))
        except (UnicodeEncodeError, binascii.Error, ValueError) as exc:
            raise MalformedTokenError(f"Invalid base64url segment: {exc}") from exc
