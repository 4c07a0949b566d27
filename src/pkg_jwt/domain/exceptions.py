class TokenError(Exception):
    """Base class for every error raised by pkg_jwt."""
    pass


class InvalidTokenError(TokenError):
    """Raised when a token is rejected during decoding."""
    pass


class MalformedTokenError(InvalidTokenError):
    """Raised when a token cannot be split or parsed."""
    pass


class InvalidTypeError(InvalidTokenError):
    """Raised when the header `typ` is not JWT."""
    pass


class MissingAlgorithmError(InvalidTokenError):
    """Raised when the header carries no `alg`."""
    pass


class UnknownAlgorithmError(InvalidTokenError):
    """Raised when an algorithm identifier is outside none/HS<n>/RS<n>."""
    pass


class AlgorithmNotAllowedError(InvalidTokenError):
    """Raised when the header algorithm is not in the pinned allow-list."""
    pass


class NoneAlgorithmProhibitedError(InvalidTokenError):
    """Raised when an unsigned token is decoded without allow_none."""
    pass


class SignatureVerificationError(InvalidTokenError):
    """Raised when the signature does not match the payload."""
    pass


class TokenExpiredError(InvalidTokenError):
    """Raised when token has expired."""
    pass


class TokenNotYetValidError(InvalidTokenError):
    """Raised when token is used before its `nbf` time."""
    pass


class SecretFormatError(TokenError):
    """Raised when a decode-time secret argument has an unsupported shape."""
    pass


class SigningError(TokenError):
    """Raised when the signature primitive fails while encoding."""
    pass


class UnsupportedHashStrengthError(SigningError):
    """Raised when no hash function exists for the requested strength."""
    pass


class ClaimsEncodingError(TokenError):
    """Raised when the claims cannot be serialized to JSON."""
    pass
