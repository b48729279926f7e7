"""Unit tests for auth/tokens.py -- app-bound JWT issuance."""

from __future__ import annotations

import time
from datetime import timedelta

import pytest
from jose import JWTError, jwt

from auth.models import App, User
from auth.tokens import ALGORITHM, TokenError, new_token

USER = User(id=7, email="a@x.com", pass_hash=b"$2b$04$unused")
APP = App(id=3, name="billing", secret="billing-secret-0123456789abcdef01234567")
OTHER_APP = App(id=4, name="reports", secret="reports-secret-0123456789abcdef01234567")


def test_token_carries_user_and_app_claims():
    token = new_token(USER, APP, timedelta(minutes=30))
    claims = jwt.decode(token, APP.secret, algorithms=[ALGORITHM])

    assert claims["uid"] == 7
    assert claims["email"] == "a@x.com"
    assert claims["app_id"] == 3


def test_expiry_is_issue_time_plus_ttl():
    ttl = timedelta(minutes=30)
    before = int(time.time())
    token = new_token(USER, APP, ttl)
    after = int(time.time())

    claims = jwt.decode(token, APP.secret, algorithms=[ALGORITHM])

    assert claims["exp"] - claims["iat"] == int(ttl.total_seconds())
    assert before <= claims["iat"] <= after


def test_token_does_not_verify_with_another_apps_secret():
    token = new_token(USER, APP, timedelta(minutes=30))

    with pytest.raises(JWTError):
        jwt.decode(token, OTHER_APP.secret, algorithms=[ALGORITHM])


def test_token_never_contains_password_hash():
    token = new_token(USER, APP, timedelta(minutes=30))
    claims = jwt.get_unverified_claims(token)

    assert "pass_hash" not in claims
    assert USER.pass_hash.decode() not in token


def test_missing_secret_raises_token_error():
    with pytest.raises(TokenError):
        new_token(USER, App(id=9, name="broken", secret=""), timedelta(minutes=5))


def test_invalid_key_material_raises_token_error():
    """HMAC refuses PEM key material; the failure must surface as TokenError."""
    pem_app = App(id=10, name="pem", secret="-----BEGIN PUBLIC KEY-----\nabc\n-----END PUBLIC KEY-----")

    with pytest.raises(TokenError):
        new_token(USER, pem_app, timedelta(minutes=5))
