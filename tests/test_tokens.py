"""Unit tests for auth/tokens.py -- JWT issuance and decoding.

Covers:
- access and refresh tokens carry the expected claims and types
- every issued token is unique (jti), so rotation always changes the value
- decode() rejects wrong type, tampering, wrong key, and expired tokens
- a missing signing key raises TokenIssuanceError
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth.errors import TokenIssuanceError
from auth.models import User
from auth.tokens import ACCESS, REFRESH, TokenIssuer

TEST_SECRET = "test-secret-key-for-authsvc-0123456789abcdef"


@pytest.fixture
def user() -> User:
    return User(id=7, fullname="Ada Lovelace", username="ada", email="ada@x.com", hashed_password="$2b$...")


class TestIssue:
    def test_access_token_claims(self, issuer: TokenIssuer, user: User) -> None:
        claims = jwt.get_unverified_claims(issuer.issue_access_token(user))
        assert claims["sub"] == "7"
        assert claims["user_id"] == 7
        assert claims["username"] == "ada"
        assert claims["email"] == "ada@x.com"
        assert claims["fullname"] == "Ada Lovelace"
        assert claims["type"] == ACCESS
        assert claims["exp"] - claims["iat"] == 900

    def test_refresh_token_claims(self, issuer: TokenIssuer, user: User) -> None:
        """Refresh tokens carry the user id only -- no profile data."""
        claims = jwt.get_unverified_claims(issuer.issue_refresh_token(user))
        assert claims["user_id"] == 7
        assert claims["type"] == REFRESH
        assert "email" not in claims
        assert claims["exp"] - claims["iat"] == 864000

    def test_pair_reports_lifetimes(self, issuer: TokenIssuer, user: User) -> None:
        pair = issuer.issue_pair(user)
        assert pair.access_expires_in == 900
        assert pair.refresh_expires_in == 864000
        assert pair.access_token != pair.refresh_token

    def test_tokens_unique_with_frozen_clock(self, user: User) -> None:
        """Two refresh tokens minted at the same instant must still differ."""
        fixed = datetime.now(timezone.utc)
        issuer = TokenIssuer(TEST_SECRET, clock=lambda: fixed)
        assert issuer.issue_refresh_token(user) != issuer.issue_refresh_token(user)

    def test_missing_key_raises(self, user: User) -> None:
        issuer = TokenIssuer("")
        with pytest.raises(TokenIssuanceError):
            issuer.issue_access_token(user)
        with pytest.raises(TokenIssuanceError):
            issuer.issue_pair(user)

    def test_from_settings(self) -> None:
        class _Settings:
            secret_key = TEST_SECRET
            refresh_secret_key = ""
            access_token_expire_seconds = 60
            refresh_token_expire_seconds = 120

        issuer = TokenIssuer.from_settings(_Settings())
        assert issuer.access_expire_seconds == 60
        assert issuer.refresh_expire_seconds == 120


class TestDecode:
    def test_round_trip(self, issuer: TokenIssuer, user: User) -> None:
        payload = issuer.decode(issuer.issue_access_token(user))
        assert payload is not None
        assert payload["user_id"] == 7

    def test_refresh_token_is_not_an_access_token(self, issuer: TokenIssuer, user: User) -> None:
        refresh = issuer.issue_refresh_token(user)
        assert issuer.decode(refresh) is None
        assert issuer.decode(refresh, expected_type=REFRESH) is not None

    def test_tampered_token_rejected(self, issuer: TokenIssuer, user: User) -> None:
        token = issuer.issue_access_token(user)
        head, payload, sig = token.split(".")
        flipped = ("A" if sig[0] != "A" else "B") + sig[1:]
        assert issuer.decode(f"{head}.{payload}.{flipped}") is None

    def test_wrong_key_rejected(self, issuer: TokenIssuer, user: User) -> None:
        other = TokenIssuer("another-secret-key-that-is-long-enough-xx")
        assert other.decode(issuer.issue_access_token(user)) is None

    def test_expired_token_rejected(self, user: User) -> None:
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        issuer = TokenIssuer(TEST_SECRET, access_expire_seconds=60, clock=lambda: past)
        assert issuer.decode(issuer.issue_access_token(user)) is None

    def test_garbage_rejected(self, issuer: TokenIssuer) -> None:
        assert issuer.decode("not.a.jwt") is None
        assert issuer.decode("") is None

    def test_separate_refresh_key(self, user: User) -> None:
        issuer = TokenIssuer(TEST_SECRET, refresh_secret_key="refresh-only-secret-key-0123456789abcdef")
        refresh = issuer.issue_refresh_token(user)
        assert issuer.decode(refresh, expected_type=REFRESH) is not None
        # Not verifiable with the access key.
        assert TokenIssuer(TEST_SECRET).decode(refresh, expected_type=REFRESH) is None
