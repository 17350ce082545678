"""
auth/tokens.py -- JWT access and refresh token issuance.

Security design decisions:
  JWT: python-jose with HS256. Access tokens are short-lived (minutes) and
       carry the user's identity claims. Refresh tokens are long-lived (days)
       and carry only the user id; they are persisted server-side by the
       SessionRegistry so logout can revoke them.

  jti: every token gets a random uuid4 jti. Two refresh tokens minted for the
       same user within the same second therefore still differ, which the
       rotation invariant (new refresh token != stored one) depends on.

  type claim: "access" or "refresh". decode() rejects a token whose type does
       not match, so a refresh token cannot be replayed as an access token.

  Failures: issuing never does I/O. A missing signing key or any encoder error
       raises TokenIssuanceError; AuthService reports it as InternalError so no
       signing detail reaches the client. decode() returns None on any failure
       and the request-authentication layer turns that into a 401.

Layer rule: no imports from api/. Settings are passed in by the caller.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable

from jose import JWTError, jwt

from auth.errors import TokenIssuanceError
from auth.models import TokenPair, User

_ALGORITHM = "HS256"

ACCESS = "access"
REFRESH = "refresh"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """Create and decode signed, time-bounded tokens.

    Args:
        secret_key:              HMAC key for access tokens.
        access_expire_seconds:   Access token lifetime.
        refresh_expire_seconds:  Refresh token lifetime.
        refresh_secret_key:      HMAC key for refresh tokens. Defaults to
                                 secret_key when empty.
        clock:                   Returns the current aware UTC datetime.
                                 Injected by tests; defaults to the system clock.
    """

    def __init__(
        self,
        secret_key: str,
        access_expire_seconds: int = 15 * 60,
        refresh_expire_seconds: int = 10 * 24 * 3600,
        refresh_secret_key: str = "",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._secret_key = secret_key
        self._refresh_secret_key = refresh_secret_key or secret_key
        self.access_expire_seconds = access_expire_seconds
        self.refresh_expire_seconds = refresh_expire_seconds
        self._clock = clock

    @classmethod
    def from_settings(cls, settings) -> TokenIssuer:
        return cls(
            secret_key=settings.secret_key,
            access_expire_seconds=settings.access_token_expire_seconds,
            refresh_expire_seconds=settings.refresh_token_expire_seconds,
            refresh_secret_key=settings.refresh_secret_key,
        )

    # ------------------------------------------------------------------
    # Issue
    # ------------------------------------------------------------------

    def issue_access_token(self, user: User) -> str:
        claims = {
            "sub": str(user.id),
            "user_id": user.id,
            "username": user.username,
            "email": user.email,
            "fullname": user.fullname,
        }
        return self._sign(claims, ACCESS, self.access_expire_seconds, self._secret_key)

    def issue_refresh_token(self, user: User) -> str:
        claims = {"sub": str(user.id), "user_id": user.id}
        return self._sign(claims, REFRESH, self.refresh_expire_seconds, self._refresh_secret_key)

    def issue_pair(self, user: User) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access_token(user),
            refresh_token=self.issue_refresh_token(user),
            access_expires_in=self.access_expire_seconds,
            refresh_expires_in=self.refresh_expire_seconds,
        )

    def _sign(self, claims: dict, token_type: str, expire_seconds: int, key: str) -> str:
        if not key:
            raise TokenIssuanceError("No signing key configured.")
        now = self._clock()
        payload = {
            **claims,
            "type": token_type,
            "iat": now,
            "exp": now + timedelta(seconds=expire_seconds),
            "jti": uuid.uuid4().hex,
        }
        try:
            return jwt.encode(payload, key, algorithm=_ALGORITHM)
        except Exception as exc:
            raise TokenIssuanceError(f"Could not sign {token_type} token.") from exc

    # ------------------------------------------------------------------
    # Decode
    # ------------------------------------------------------------------

    def decode(self, token: str, expected_type: str = ACCESS) -> dict | None:
        """Verify signature, expiry, and type. Returns the claims or None.

        Returning None (rather than raising) keeps the caller simple: any
        invalid token is treated as unauthenticated.
        """
        key = self._refresh_secret_key if expected_type == REFRESH else self._secret_key
        if not key:
            return None
        try:
            payload = jwt.decode(token, key, algorithms=[_ALGORITHM])
        except JWTError:
            return None
        if payload.get("type") != expected_type or "user_id" not in payload:
            return None
        return payload
