from __future__ import annotations

import hashlib
import logging
from typing import Any, Callable, Dict

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from jwt.algorithms import HMACAlgorithm, RSAAlgorithm
from jwt.exceptions import InvalidKeyError

from ...domain.constants import AlgorithmFamily
from ...domain.exceptions import SigningError, UnsupportedHashStrengthError
from ...domain.ports import SignatureAlgorithm
from ...domain.value_objects import Algorithm

logger = logging.getLogger(__name__)

_HMAC_HASHES: Dict[int, Callable[..., Any]] = {
    1: hashlib.sha1,
    224: hashlib.sha224,
    256: hashlib.sha256,
    384: hashlib.sha384,
    512: hashlib.sha512,
}

_RSA_HASHES: Dict[int, type[hashes.HashAlgorithm]] = {
    1: hashes.SHA1,
    224: hashes.SHA224,
    256: hashes.SHA256,
    384: hashes.SHA384,
    512: hashes.SHA512,
}


class UnsignedSigner:
    """The `none` algorithm: empty signature, nothing to verify."""

    def sign(self, payload: bytes, key: Any) -> bytes:
        return b""

    def verify(self, payload: bytes, key: Any, signature: bytes) -> bool:
        return True


class HMACSigner:
    """
    HMAC-SHA-<strength> backed by PyJWT's HMACAlgorithm.

    PyJWT refuses PEM / SSH public keys as HMAC secrets, which blocks the
    classic RS -> HS confusion where a public key is replayed as a secret.
    An empty secret is unusable: signing raises, verification is False.
    """

    def __init__(self, strength: int) -> None:
        hash_alg = _HMAC_HASHES.get(strength)
        if hash_alg is None:
            raise UnsupportedHashStrengthError(f"Unknown HMAC SHA algorithm: SHA-{strength}")
        self.strength = strength
        self._algorithm = HMACAlgorithm(hash_alg)

    def sign(self, payload: bytes, key: Any) -> bytes:
        try:
            prepared = self._algorithm.prepare_key(_as_secret(key))
        except InvalidKeyError as exc:
            raise SigningError(f"Unusable HMAC secret: {exc}") from exc
        return self._algorithm.sign(payload, prepared)

    def verify(self, payload: bytes, key: Any, signature: bytes) -> bool:
        try:
            prepared = self._algorithm.prepare_key(_as_secret(key))
        except (InvalidKeyError, SigningError) as exc:
            logger.debug("HMAC verification key rejected: %s", exc)
            return False
        # compare_digest inside PyJWT
        return self._algorithm.verify(payload, prepared, signature)


class RSASigner:
    """
    RSASSA-PKCS1-v1_5 with SHA-<strength>, backed by PyJWT's RSAAlgorithm.

    Keys may be PEM text/bytes or `cryptography` key objects.
    """

    def __init__(self, strength: int) -> None:
        hash_alg = _RSA_HASHES.get(strength)
        if hash_alg is None:
            raise UnsupportedHashStrengthError(f"Unknown RSA hash algorithm: SHA-{strength}")
        self.strength = strength
        self._algorithm = RSAAlgorithm(hash_alg)

    def sign(self, payload: bytes, key: Any) -> bytes:
        try:
            prepared = self._algorithm.prepare_key(key)
        except (InvalidKeyError, UnsupportedAlgorithm, ValueError, TypeError) as exc:
            raise SigningError(f"Could not load RSA private key: {exc}") from exc

        if not isinstance(prepared, RSAPrivateKey):
            raise SigningError("RSA signing requires a private key")

        try:
            return self._algorithm.sign(payload, prepared)
        except (UnsupportedAlgorithm, ValueError) as exc:
            raise SigningError(f"RSA signing failed: {exc}") from exc

    def verify(self, payload: bytes, key: Any, signature: bytes) -> bool:
        try:
            prepared = self._algorithm.prepare_key(key)
        except (InvalidKeyError, UnsupportedAlgorithm, ValueError, TypeError) as exc:
            logger.debug("RSA verification key rejected: %s", exc)
            return False

        if isinstance(prepared, RSAPrivateKey):
            prepared = prepared.public_key()
        if not isinstance(prepared, RSAPublicKey):
            return False

        return self._algorithm.verify(payload, prepared, signature)


def _as_secret(key: Any) -> str | bytes:
    if isinstance(key, (str, bytes)):
        if not key:
            raise SigningError("HMAC secret must not be empty")
        return key
    raise SigningError(f"HMAC secret must be str or bytes, not {type(key).__name__}")


def signer_for(algorithm: Algorithm) -> SignatureAlgorithm:
    """
    Dispatch a parsed algorithm to its signing primitive.

    Raises:
        UnsupportedHashStrengthError for an HS<n>/RS<n> with no hash function.
    """
    if algorithm.family is AlgorithmFamily.NONE:
        return UnsignedSigner()
    if algorithm.family is AlgorithmFamily.HMAC:
        return HMACSigner(algorithm.strength)
    if algorithm.family is AlgorithmFamily.RSA:
        return RSASigner(algorithm.strength)
    # Fallback – should not happen, the enum is closed
    raise SigningError(f"No signer for algorithm {algorithm.name!r}")
