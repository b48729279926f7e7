"""Unit tests for core/config.py -- Settings validation."""

from datetime import timedelta

import pytest

from core.config import Settings


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_defaults_are_valid():
    settings = _settings(bcrypt_rounds=12, token_ttl_seconds=3600)

    assert settings.token_ttl == timedelta(hours=1)
    assert settings.port == 44044


@pytest.mark.parametrize("ttl", [0, -5])
def test_non_positive_ttl_is_rejected(ttl):
    with pytest.raises(ValueError, match="TOKEN_TTL_SECONDS"):
        _settings(token_ttl_seconds=ttl)


@pytest.mark.parametrize("rounds", [3, 32])
def test_bcrypt_rounds_out_of_range_are_rejected(rounds):
    with pytest.raises(ValueError, match="BCRYPT_ROUNDS"):
        _settings(bcrypt_rounds=rounds)


def test_unknown_env_is_rejected():
    with pytest.raises(ValueError, match="ENV"):
        _settings(env="staging")


def test_env_vars_are_read(monkeypatch):
    monkeypatch.setenv("TOKEN_TTL_SECONDS", "90")
    monkeypatch.setenv("ENV", "prod")

    settings = _settings()

    assert settings.token_ttl == timedelta(seconds=90)
    assert settings.env == "prod"
