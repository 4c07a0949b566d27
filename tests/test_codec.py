# tests/test_codec.py
import base64
import hashlib
import hmac
import json
import logging
import time

import pytest

from pkg_jwt import JWT
from pkg_jwt.domain.entities import DecodedToken, EncodedToken
from pkg_jwt.domain.exceptions import (
    AlgorithmNotAllowedError,
    InvalidTypeError,
    MalformedTokenError,
    MissingAlgorithmError,
    NoneAlgorithmProhibitedError,
    SecretFormatError,
    SignatureVerificationError,
    SigningError,
    TokenExpiredError,
    TokenNotYetValidError,
    UnknownAlgorithmError,
    UnsupportedHashStrengthError,
)

from conftest import NOW


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _segment(obj) -> str:
    return _b64(json.dumps(obj, separators=(",", ":")).encode())


def _hs256_token(header, claims, secret: str) -> str:
    payload = f"{_segment(header)}.{_segment(claims)}"
    sig = hmac.new(secret.encode(), payload.encode(), hashlib.sha256).digest()
    return f"{payload}.{_b64(sig)}"


# --- Encode ---------------------------------------------------------------


def test_encode_wire_format():
    jwt = JWT(secret="s3cr3t", claims={"sub": "alice"})
    token = jwt.encode()

    header_segment, claims_segment, signature_segment = token.split(".")
    assert header_segment == _segment({"typ": "JWT", "alg": "HS256"})
    assert claims_segment == _segment({"sub": "alice"})
    assert "=" not in token
    assert token == _hs256_token({"typ": "JWT", "alg": "HS256"}, {"sub": "alice"}, "s3cr3t")

    assert jwt.token == token
    assert isinstance(jwt.last_result, EncodedToken)
    assert jwt.header == {"typ": "JWT", "alg": "HS256"}


def test_encode_injects_exp_nbf_without_overriding():
    jwt = JWT(secret="s", claims={"sub": "alice"}, expires=NOW + 60, not_before=NOW - 60)
    jwt.encode()
    assert jwt.claims == {"sub": "alice", "exp": NOW + 60, "nbf": NOW - 60}

    jwt = JWT(secret="s", claims={"exp": 5, "nbf": 1}, expires=NOW + 60, not_before=NOW)
    jwt.encode()
    assert jwt.claims == {"exp": 5, "nbf": 1}


def test_encode_none_is_not_blocked():
    jwt = JWT(algorithm="none", claims={"sub": "alice"})
    token = jwt.encode()
    assert token.endswith(".")
    assert token.count(".") == 2


def test_encode_unknown_algorithm():
    with pytest.raises(UnknownAlgorithmError):
        JWT(algorithm="ES256", secret="s").encode()
    with pytest.raises(UnsupportedHashStrengthError):
        JWT(algorithm="HS999", secret="s").encode()


# --- Round trips ------------------------------------------------------------


@pytest.mark.parametrize("alg", ["HS1", "HS224", "HS256", "HS384", "HS512"])
def test_hmac_round_trip(alg):
    claims = {"sub": "alice", "n": 1, "ok": True, "none": None, "nested": {"a": [1, "b"]}, "name": "Zoë"}
    token = JWT(algorithm=alg, secret="s3cr3t", claims=dict(claims)).encode()

    jwt = JWT(secret="s3cr3t")
    assert jwt.decode(token) == claims
    assert jwt.algorithm == alg
    assert jwt.token == token
    assert isinstance(jwt.last_result, DecodedToken)


@pytest.mark.parametrize("alg", ["RS256", "RS384", "RS512"])
def test_rsa_round_trip(alg, rsa_keys):
    private_pem, public_pem = rsa_keys
    token = JWT(algorithm=alg, secret=private_pem, claims={"sub": "alice"}).encode()
    assert JWT().decode(token, public_pem) == {"sub": "alice"}


def test_rsa_mismatched_keypair(rsa_keys, other_rsa_keys):
    private_pem, _ = rsa_keys
    _, other_public = other_rsa_keys
    token = JWT(algorithm="RS256", secret=private_pem, claims={"sub": "alice"}).encode()
    with pytest.raises(SignatureVerificationError):
        JWT().decode(token, other_public)


def test_alice_scenario():
    token = JWT(algorithm="HS256", secret="s3cr3t", claims={"sub": "alice"}).encode()
    assert JWT().decode(token, "s3cr3t") == {"sub": "alice"}
    with pytest.raises(SignatureVerificationError):
        JWT().decode(token, "wrong")


def test_round_trip_includes_injected_times(clock):
    token = JWT(secret="s", claims={"sub": "a"}, expires=NOW + 10, not_before=NOW).encode()
    jwt = JWT(secret="s", clock=clock)
    assert jwt.decode(token) == {"sub": "a", "exp": NOW + 10, "nbf": NOW}
    assert jwt.expires == NOW + 10
    assert jwt.not_before == NOW


# --- Signature --------------------------------------------------------------


def test_tampered_signature():
    token = JWT(secret="s3cr3t", claims={"sub": "alice"}).encode()
    header, claims, signature = token.split(".")
    tampered = signature[:-2] + ("AA" if signature[-2:] != "AA" else "BB")
    with pytest.raises(SignatureVerificationError):
        JWT(secret="s3cr3t").decode(f"{header}.{claims}.{tampered}")
    with pytest.raises(SignatureVerificationError):
        JWT(secret="s3cr3t").decode(f"{header}.{claims}.")


def test_tampered_claims():
    token = JWT(secret="s3cr3t", claims={"sub": "alice"}).encode()
    header, _, signature = token.split(".")
    forged = _segment({"sub": "mallory"})
    with pytest.raises(SignatureVerificationError):
        JWT(secret="s3cr3t").decode(f"{header}.{forged}.{signature}")


def test_public_key_as_hmac_secret_is_rejected(rsa_keys):
    _, public_pem = rsa_keys
    forged = _hs256_token({"typ": "JWT", "alg": "HS256"}, {"sub": "mallory"}, public_pem)
    with pytest.raises(SignatureVerificationError):
        JWT().decode(forged, public_pem)


# --- none -------------------------------------------------------------------


def test_none_rejected_by_default():
    token = JWT(algorithm="none", claims={"sub": "alice"}).encode()
    with pytest.raises(NoneAlgorithmProhibitedError):
        JWT().decode(token)


def test_none_allowed_ignores_signature():
    token = JWT(algorithm="none", claims={"sub": "alice"}).encode()
    jwt = JWT(allow_none=True)
    assert jwt.decode(token) == {"sub": "alice"}
    assert jwt.algorithm == "none"

    payload = token.rsplit(".", 1)[0]
    assert JWT(allow_none=True).decode(payload + ".!!not-base64!!") == {"sub": "alice"}


# --- Time -------------------------------------------------------------------


def test_expired(clock):
    token = JWT(secret="s", claims={"exp": NOW - 1}).encode()
    jwt = JWT(secret="s", clock=clock)
    with pytest.raises(TokenExpiredError):
        jwt.decode(token)
    assert jwt.claims == {}
    assert jwt.expires is None


def test_exp_boundary(clock):
    token = JWT(secret="s", claims={"exp": NOW}).encode()
    jwt = JWT(secret="s", clock=clock)
    assert jwt.decode(token) == {"exp": NOW}
    assert jwt.expires == NOW


def test_not_yet_valid(clock):
    token = JWT(secret="s", claims={"nbf": NOW + 1}).encode()
    with pytest.raises(TokenNotYetValidError):
        JWT(secret="s", clock=clock).decode(token)

    token = JWT(secret="s", claims={"nbf": NOW}).encode()
    assert JWT(secret="s", clock=clock).decode(token) == {"nbf": NOW}


def test_leeway(clock):
    token = JWT(secret="s", claims={"exp": NOW - 5, "nbf": NOW + 5}).encode()
    with pytest.raises(TokenExpiredError):
        JWT(secret="s", clock=clock, leeway=4).decode(token)
    assert JWT(secret="s", clock=clock, leeway=5).decode(token)["exp"] == NOW - 5


def test_real_clock():
    token = JWT(secret="s", claims={"exp": int(time.time()) + 3600}).encode()
    assert "exp" in JWT(secret="s").decode(token)


@pytest.mark.parametrize("claims", [{"exp": "tomorrow"}, {"nbf": True}, {"exp": [1]}])
def test_non_numeric_time_claims(claims):
    token = JWT(secret="s", claims=claims).encode()
    with pytest.raises(MalformedTokenError):
        JWT(secret="s").decode(token)


# --- Malformed / header contract ---------------------------------------------


@pytest.mark.parametrize(
    "token",
    ["", "abc", "a.b", "a.b.c.d", "not-json.e30.", f"{_segment({'typ': 'JWT', 'alg': 'HS256'})}.%%%.sig"],
)
def test_malformed(token):
    with pytest.raises(MalformedTokenError):
        JWT(secret="s").decode(token)


def test_two_segments_and_bad_json_header():
    good = JWT(secret="s", claims={"sub": "a"}).encode()
    header, claims, signature = good.split(".")
    with pytest.raises(MalformedTokenError):
        JWT(secret="s").decode(f"{header}.{claims}")
    with pytest.raises(MalformedTokenError):
        JWT(secret="s").decode(f"{_b64(b'{not json')}.{claims}.{signature}")


def test_non_string_token():
    with pytest.raises(MalformedTokenError):
        JWT(secret="s").decode(None)
    token = JWT(secret="s", claims={"sub": "a"}).encode()
    assert JWT(secret="s").decode(token.encode("ascii")) == {"sub": "a"}


def test_invalid_type():
    token = _hs256_token({"typ": "JWS", "alg": "HS256"}, {"sub": "a"}, "s")
    with pytest.raises(InvalidTypeError):
        JWT(secret="s").decode(token)
    token = _hs256_token({"alg": "HS256"}, {"sub": "a"}, "s")
    with pytest.raises(InvalidTypeError):
        JWT(secret="s").decode(token)


def test_missing_algorithm():
    token = _hs256_token({"typ": "JWT"}, {"sub": "a"}, "s")
    with pytest.raises(MissingAlgorithmError):
        JWT(secret="s").decode(token)


@pytest.mark.parametrize("alg", ["ES256", "HS", "hs256", 256])
def test_unknown_algorithm(alg):
    token = _hs256_token({"typ": "JWT", "alg": alg}, {"sub": "a"}, "s")
    with pytest.raises(UnknownAlgorithmError):
        JWT(secret="s").decode(token)


# --- State --------------------------------------------------------------------


def test_decode_resets_previous_state():
    jwt = JWT(secret="s")
    jwt.decode(JWT(secret="s", claims={"sub": "a", "exp": int(time.time()) + 60}).encode())
    assert jwt.expires is not None

    with pytest.raises(SignatureVerificationError):
        jwt.decode(JWT(secret="other", claims={"sub": "b"}).encode())
    assert jwt.claims == {}
    assert jwt.expires is None
    assert jwt.not_before is None
    assert jwt.algorithm is None
    assert jwt.last_result is None


def test_claims_builder_reuse():
    jwt = JWT(secret="s")
    jwt.claims["sub"] = "alice"
    first = jwt.encode()
    jwt.claims["role"] = "admin"
    second = jwt.encode()
    assert first != second
    assert JWT(secret="s").decode(second) == {"sub": "alice", "role": "admin"}


# --- Secrets --------------------------------------------------------------------


def test_secret_argument_is_stored():
    token = JWT(secret="s3cr3t", claims={"sub": "a"}).encode()
    jwt = JWT(secret="old")
    jwt.decode(token, "s3cr3t")
    assert jwt.secret == "s3cr3t"
    # later decodes reuse it
    assert jwt.decode(token) == {"sub": "a"}


def test_secret_by_issuer():
    secrets = {"issuer-a": "secret-a", "issuer-b": "secret-b"}
    token_a = JWT(secret="secret-a", claims={"iss": "issuer-a"}).encode()
    token_b = JWT(secret="secret-b", claims={"iss": "issuer-b"}).encode()

    jwt = JWT()
    assert jwt.decode(token_a, secrets) == {"iss": "issuer-a"}
    assert jwt.secret == "secret-a"
    assert jwt.decode(token_b, secrets) == {"iss": "issuer-b"}


def test_secret_by_issuer_missing_fails_closed():
    token = JWT(secret="secret-a", claims={"iss": "unknown"}).encode()
    jwt = JWT()
    with pytest.raises(SignatureVerificationError):
        jwt.decode(token, {"issuer-a": "secret-a"})
    assert jwt.secret is None


def test_empty_secret_is_unusable():
    with pytest.raises(SigningError):
        JWT(claims={"sub": "a"}).encode()

    forged = _hs256_token({"typ": "JWT", "alg": "HS256"}, {"sub": "a"}, "")
    with pytest.raises(SignatureVerificationError):
        JWT().decode(forged)
    with pytest.raises(SignatureVerificationError):
        JWT().decode(forged, {"": ""})


def test_secret_callback(rsa_keys):
    private_pem, public_pem = rsa_keys
    token = JWT(algorithm="RS256", secret=private_pem, claims={"iss": "rsa-issuer"}).encode()
    calls = []

    def lookup(claims):
        calls.append(dict(claims))
        return public_pem if claims.get("iss") == "rsa-issuer" else None

    assert JWT().decode(token, lookup) == {"iss": "rsa-issuer"}
    assert calls == [{"iss": "rsa-issuer"}]


def test_secret_format_error():
    token = JWT(secret="s", claims={"sub": "a"}).encode()
    with pytest.raises(SecretFormatError):
        JWT().decode(token, 42)
    with pytest.raises(SecretFormatError):
        JWT().decode(token, lambda claims: ["not", "a", "key"])


# --- Pinning ---------------------------------------------------------------------


def test_pinned_algorithms(rsa_keys):
    private_pem, public_pem = rsa_keys
    rs_token = JWT(algorithm="RS256", secret=private_pem, claims={"sub": "a"}).encode()
    hs_token = JWT(secret="s", claims={"sub": "a"}).encode()

    assert JWT(algorithms=["RS256"]).decode(rs_token, public_pem) == {"sub": "a"}

    with pytest.raises(AlgorithmNotAllowedError):
        JWT(algorithms=["RS256"]).decode(hs_token, "s")

    none_token = JWT(algorithm="none", claims={"sub": "a"}).encode()
    with pytest.raises(NoneAlgorithmProhibitedError):
        JWT(algorithms=["RS256"]).decode(none_token)
    with pytest.raises(AlgorithmNotAllowedError):
        JWT(algorithms=["RS256"], allow_none=True).decode(none_token)
    assert JWT(algorithms=["none"], allow_none=True).decode(none_token) == {"sub": "a"}


# --- Hostile headers and claims ---------------------------------------------------


@pytest.mark.parametrize("alg", ["HS999", "RS100", "HS" + "1" * 5000])
def test_header_strength_without_hash_is_rejected(alg, caplog):
    token = _hs256_token({"typ": "JWT", "alg": alg}, {"sub": "a"}, "s")
    with caplog.at_level(logging.INFO, logger="pkg_jwt"):
        with pytest.raises(UnknownAlgorithmError):
            JWT(secret="s").decode(token)
    assert "UnknownAlgorithmError" in caplog.text


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_time_claims(value):
    token = _hs256_token({"typ": "JWT", "alg": "HS256"}, {"sub": "a", "exp": value}, "s")
    with pytest.raises(MalformedTokenError):
        JWT(secret="s").decode(token)


def test_overflowing_time_claim():
    claims_segment = _b64(b'{"nbf":1e400}')
    payload = f"{_segment({'typ': 'JWT', 'alg': 'HS256'})}.{claims_segment}"
    sig = hmac.new(b"s", payload.encode(), hashlib.sha256).digest()
    with pytest.raises(MalformedTokenError):
        JWT(secret="s").decode(f"{payload}.{_b64(sig)}")
