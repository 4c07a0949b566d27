# src/pkg_jwt/config/cli.py

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from .env import jwt_from_settings, settings_from_env
from ..domain.exceptions import TokenError


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pkg-jwt",
        description="Encode or verify signed JWTs (defaults from JWT_* env vars)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log to stderr.")

    sub = parser.add_subparsers(dest="command", required=True)

    enc = sub.add_parser("encode", help="Sign a claims object.")
    enc.add_argument(
        "claims",
        nargs="?",
        help="Claims as a JSON object (read from stdin when omitted).",
    )
    enc.add_argument("--alg", help="Signing algorithm, e.g. HS256, RS256 or none.")
    enc.add_argument("--secret", help="HMAC shared secret.")
    enc.add_argument("--key-file", help="PEM private key (RSA) or secret file.")
    enc.add_argument(
        "--expires-in",
        type=int,
        help="Add an exp claim this many seconds from now (unless present).",
    )
    enc.add_argument(
        "--not-before-in",
        type=int,
        help="Add an nbf claim this many seconds from now (unless present).",
    )

    dec = sub.add_parser("decode", help="Verify a token and print its claims.")
    dec.add_argument("token", nargs="?", help="Token (read from stdin when omitted).")
    dec.add_argument("--secret", help="HMAC shared secret.")
    dec.add_argument("--key-file", help="PEM public key (RSA) or secret file.")
    dec.add_argument(
        "--alg",
        "-A",
        nargs="*",
        help="Accepted algorithms (pins the header alg).",
    )
    dec.add_argument("--leeway", type=int, help="Clock skew allowance in seconds.")

    for p in (enc, dec):
        p.add_argument(
            "--allow-none",
            action="store_true",
            help="Permit unsigned (alg=none) tokens.",
        )

    return parser.parse_args(args=argv)


def _key_from_args(args: argparse.Namespace) -> Any:
    if args.key_file:
        return Path(args.key_file).read_text(encoding="utf-8")
    return args.secret


def _read_input(value: str | None) -> str:
    if value is not None:
        return value
    return sys.stdin.read().strip()


def _run(args: argparse.Namespace) -> dict[str, Any]:
    settings = settings_from_env()
    if args.allow_none:
        settings.allow_none = True

    if args.command == "encode":
        if args.alg:
            settings.algorithm = args.alg
        if args.expires_in is not None:
            settings.expires_in = args.expires_in
        if args.not_before_in is not None:
            settings.not_before_in = args.not_before_in

        token = jwt_from_settings(settings)
        key = _key_from_args(args)
        if key is not None:
            token.secret = key

        try:
            claims = json.loads(_read_input(args.claims))
        except ValueError as exc:
            raise ValueError(f"claims are not valid JSON: {exc}") from exc
        if not isinstance(claims, dict):
            raise ValueError("claims must be a JSON object")

        token.claims.update(claims)
        return {"token": token.encode()}

    if args.alg:
        settings.algorithms = tuple(args.alg)
    if args.leeway is not None:
        settings.leeway = args.leeway

    token = jwt_from_settings(settings, for_decode=True)
    claims = token.decode(_read_input(args.token), _key_from_args(args))
    return {
        "alg": token.algorithm,
        "claims": claims,
    }


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    try:
        summary = _run(args)
    except (TokenError, ValueError, OSError, RuntimeError) as exc:
        json.dump(
            {"ok": False, "error": str(exc), "type": type(exc).__name__},
            sys.stdout,
            indent=2,
        )
        sys.stdout.write("\n")
        sys.exit(1)

    json.dump({"ok": True, **summary}, sys.stdout, indent=2)
    sys.stdout.write("\n")


if __name__ == "__main__":
    main()
