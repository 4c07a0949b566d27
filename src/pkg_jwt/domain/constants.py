from enum import Enum

TOKEN_TYPE = "JWT"
DEFAULT_ALGORITHM = "HS256"
UNSIGNED_ALGORITHM = "none"


class AlgorithmFamily(Enum):
    NONE = "none"
    HMAC = "HS"
    RSA = "RS"
