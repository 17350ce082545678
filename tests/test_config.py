"""Unit tests for core/config.py -- SECRET_KEY policy and defaults."""

from __future__ import annotations

import pytest

from core.config import Settings

_KEY = "k" * 32


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in ("DEBUG", "SECRET_KEY", "REFRESH_SECRET_KEY", "SECURE_COOKIES", "BCRYPT_ROUNDS"):
        monkeypatch.delenv(name, raising=False)


def test_production_requires_secret_key() -> None:
    with pytest.raises(ValueError, match="SECRET_KEY is required"):
        Settings(_env_file=None, debug=False)


def test_debug_generates_secret_key() -> None:
    settings = Settings(_env_file=None, debug=True)
    assert len(settings.secret_key) >= 32


def test_short_secret_key_rejected() -> None:
    with pytest.raises(ValueError, match="at least 32"):
        Settings(_env_file=None, secret_key="short")


def test_short_refresh_key_rejected() -> None:
    with pytest.raises(ValueError, match="REFRESH_SECRET_KEY"):
        Settings(_env_file=None, secret_key=_KEY, refresh_secret_key="short")


def test_defaults() -> None:
    settings = Settings(_env_file=None, secret_key=_KEY)
    assert settings.access_token_expire_seconds == 900
    assert settings.refresh_token_expire_seconds == 864000
    assert settings.secure_cookies is False
    assert settings.bcrypt_rounds == 12


def test_values_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("SECRET_KEY", _KEY)
    monkeypatch.setenv("SECURE_COOKIES", "true")
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    settings = Settings(_env_file=None)
    assert settings.secure_cookies is True
    assert settings.bcrypt_rounds == 4


def test_bcrypt_rounds_bounds() -> None:
    with pytest.raises(ValueError):
        Settings(_env_file=None, secret_key=_KEY, bcrypt_rounds=3)
