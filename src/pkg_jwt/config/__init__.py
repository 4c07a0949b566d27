"""
pkg_jwt.config

Configuration helpers:

- JWTSettings: algorithm, key material and validation options.
- settings_from_env: build JWTSettings from JWT_* environment variables.
- jwt_from_settings / jwt_from_env: build a configured JWT instance.

The `pkg-jwt` command line tool lives in `pkg_jwt.config.cli`.
"""

from __future__ import annotations

from .env import jwt_from_env, jwt_from_settings, settings_from_env
from .settings import JWTSettings

__all__ = [
    "JWTSettings",
    "settings_from_env",
    "jwt_from_settings",
    "jwt_from_env",
]
