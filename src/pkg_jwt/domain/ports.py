from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

from .entities import DecodedToken, EncodedToken


class Clock(Protocol):
    def __call__(self) -> float:
        ...


class SignatureAlgorithm(Protocol):
    """
    Port for a signing primitive bound to one family and hash strength.

    Implementations live in the adapters layer (PyJWT / cryptography).
    """

    def sign(self, payload: bytes, key: Any) -> bytes:
        """
        Raises:
          - SigningError (or UnsupportedHashStrengthError)
        """
        ...

    def verify(self, payload: bytes, key: Any, signature: bytes) -> bool:
        """
        Must return False (never raise a false positive) for a bad
        signature or unusable key.
        """
        ...


class SegmentCodec(Protocol):
    """
    Port for the JSON + base64url layer of the wire format.
    """

    def encode_segment(self, data: Mapping[str, Any]) -> str:
        ...

    def decode_segment(self, segment: str) -> dict[str, Any]:
        """
        Raises:
          - MalformedTokenError
        """
        ...

    def encode_signature(self, signature: bytes) -> str:
        ...

    def decode_signature(self, segment: str) -> bytes:
        ...


class TokenEncoder(Protocol):
    def execute(
        self,
        claims: Mapping[str, Any],
        *,
        algorithm: str,
        secret: Any,
        expires: Optional[int] = None,
        not_before: Optional[int] = None,
    ) -> EncodedToken:
        ...


class TokenDecoder(Protocol):
    """
    Port for decoding a token into verified claims.
    """

    def execute(self, token: str, secret: Any) -> DecodedToken:
        """
        Decode and verify the given token.

        Should:
          - verify signature
          - check expiry and not-before
        Raises:
          - InvalidTokenError subclasses
          - SecretFormatError
        """
        ...
