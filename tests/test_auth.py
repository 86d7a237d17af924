# tests/test_auth.py

from __future__ import annotations

import pytest

from taskreward.auth import TokenIssuer, check_password, hash_password

SECRET = "test-signing-key-at-least-32-bytes!"


def test_password_hash_roundtrip() -> None:
    hashed = hash_password("hunter2")

    assert hashed != "hunter2"
    assert check_password(hashed, "hunter2")
    assert not check_password(hashed, "hunter3")
    assert not check_password("not-a-bcrypt-hash", "hunter2")


def test_token_carries_identity() -> None:
    issuer = TokenIssuer(SECRET, ttl_minutes=5)

    claims = issuer.decode_token(issuer.create_token(7, "alice"))

    assert claims["sub"] == "7"
    assert claims["login"] == "alice"


def test_token_rejected_with_other_key_or_expired() -> None:
    token = TokenIssuer(SECRET).create_token(7, "alice")

    assert TokenIssuer("another-secret-that-is-32-bytes-long").decode_token(token) is None
    assert TokenIssuer(SECRET).decode_token("garbage") is None

    expired = TokenIssuer(SECRET, ttl_minutes=-1).create_token(7, "alice")
    assert TokenIssuer(SECRET).decode_token(expired) is None


def test_empty_secret() -> None:
    with pytest.raises(ValueError):
        TokenIssuer("")
