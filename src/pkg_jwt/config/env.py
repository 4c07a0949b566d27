from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Optional

from .settings import JWTSettings
from ..application.codec import JWT
from ..domain.constants import DEFAULT_ALGORITHM
from ..domain.exceptions import UnknownAlgorithmError
from ..domain.value_objects import Algorithm


def settings_from_env() -> JWTSettings:
    def _bool(key: str, default: bool = False) -> bool:
        raw = os.getenv(key)
        if raw is None:
            return default
        return str(raw).strip().lower() in {"1", "true", "yes", "on"}

    def _int(key: str) -> Optional[int]:
        raw = os.getenv(key)
        if raw is None or not raw.strip():
            return None
        try:
            return int(raw)
        except ValueError:
            raise RuntimeError(f"{key} must be an integer, got {raw!r}") from None

    def _split_csv(key: str) -> list[str]:
        raw = os.getenv(key)
        if not raw:
            return []
        return [x.strip() for x in raw.split(",") if x and x.strip()]

    def _read_file(key: str) -> Optional[str]:
        path = os.getenv(key)
        if not path:
            return None
        try:
            return Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise RuntimeError(f"{key}: cannot read {path}: {exc}") from exc

    algorithm = os.getenv("JWT_ALGORITHM") or DEFAULT_ALGORITHM
    pinned = _split_csv("JWT_ALGORITHMS")
    try:
        Algorithm.parse(algorithm)
        for name in pinned:
            Algorithm.parse(name)
    except UnknownAlgorithmError as exc:
        raise RuntimeError(f"Invalid JWT algorithm settings: {exc}") from exc

    # a secret file wins over the inline value so keys stay out of the env
    secret = _read_file("JWT_SECRET_FILE")
    if secret is None:
        secret = os.getenv("JWT_SECRET", "")

    return JWTSettings(
        algorithm=algorithm,
        secret=secret,
        public_key=_read_file("JWT_PUBLIC_KEY_FILE"),
        allow_none=_bool("JWT_ALLOW_NONE", False),
        algorithms=tuple(pinned) or None,
        leeway=_int("JWT_LEEWAY") or 0,
        expires_in=_int("JWT_EXPIRES_IN"),
        not_before_in=_int("JWT_NOT_BEFORE_IN"),
    )


def jwt_from_settings(settings: JWTSettings, *, for_decode: bool = False) -> JWT:
    """
    High-level factory: JWTSettings -> configured JWT instance.

    With `for_decode`, the verification key (RSA public key when set) is
    installed instead of the signing key.
    """
    now = int(time.time())
    return JWT(
        algorithm=settings.algorithm,
        allow_none=settings.allow_none,
        secret=settings.verification_key if for_decode else settings.signing_key,
        expires=now + settings.expires_in if settings.expires_in is not None else None,
        not_before=now + settings.not_before_in if settings.not_before_in is not None else None,
        algorithms=settings.algorithms,
        leeway=settings.leeway,
    )


def jwt_from_env(*, for_decode: bool = False) -> JWT:
    """Convenience wrapper using env-configured settings."""
    return jwt_from_settings(settings_from_env(), for_decode=for_decode)
