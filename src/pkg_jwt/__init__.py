"""
pkg_jwt

Encoding, decoding and verification of signed JSON Web Tokens (HMAC and
RSA, plus an opt-in unsigned mode), built as a small clean-architecture
core: pure domain types, use cases, and PyJWT/cryptography adapters for
the codec and signature primitives.
"""

import logging

__version__ = "0.1.0"

from .domain.constants import AlgorithmFamily, DEFAULT_ALGORITHM, TOKEN_TYPE
from .domain.entities import DecodedToken, EncodedToken, TokenHeader
from .domain.exceptions import (
    TokenError,
    InvalidTokenError,
    MalformedTokenError,
    InvalidTypeError,
    MissingAlgorithmError,
    UnknownAlgorithmError,
    AlgorithmNotAllowedError,
    NoneAlgorithmProhibitedError,
    SignatureVerificationError,
    TokenExpiredError,
    TokenNotYetValidError,
    SecretFormatError,
    SigningError,
    UnsupportedHashStrengthError,
    ClaimsEncodingError,
)
from .domain.secret_sources import IssuerSecretMap, LiteralSecret, SecretCallback
from .domain.value_objects import Algorithm
from .domain.ports import SignatureAlgorithm, SegmentCodec, TokenDecoder, TokenEncoder

from .application.use_cases.encode import EncodeTokenUseCase
from .application.use_cases.decode import DecodeTokenUseCase
from .application.codec import JWT

# PyJWT / cryptography backed primitives
from .adapters.pyjwt.codec import JSONSegmentCodec
from .adapters.pyjwt.signers import HMACSigner, RSASigner, signer_for

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    # domain core
    "Algorithm",
    "AlgorithmFamily",
    "DEFAULT_ALGORITHM",
    "TOKEN_TYPE",
    "TokenHeader",
    "EncodedToken",
    "DecodedToken",
    "LiteralSecret",
    "IssuerSecretMap",
    "SecretCallback",
    "SignatureAlgorithm",
    "SegmentCodec",
    "TokenEncoder",
    "TokenDecoder",
    # exceptions
    "TokenError",
    "InvalidTokenError",
    "MalformedTokenError",
    "InvalidTypeError",
    "MissingAlgorithmError",
    "UnknownAlgorithmError",
    "AlgorithmNotAllowedError",
    "NoneAlgorithmProhibitedError",
    "SignatureVerificationError",
    "TokenExpiredError",
    "TokenNotYetValidError",
    "SecretFormatError",
    "SigningError",
    "UnsupportedHashStrengthError",
    "ClaimsEncodingError",
    # use cases
    "EncodeTokenUseCase",
    "DecodeTokenUseCase",
    "JWT",
    # adapters
    "JSONSegmentCodec",
    "HMACSigner",
    "RSASigner",
    "signer_for",
]
