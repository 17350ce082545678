"""
auth/cookies.py -- Token cookie delivery.

httponly=True: JS cannot read the cookie (XSS mitigation).
samesite="strict": cookies are never sent on cross-site requests (CSRF
    mitigation, including top-level cross-site navigations).
secure: only sent over HTTPS. Taken from CookiePolicy, which the app builds
    from Settings.secure_cookies once at startup.
max_age: matches the token expiry so cookie and token expire together.

Layer rule: no imports from api/ or core/. The response argument is any
Starlette-compatible response object.
"""

from __future__ import annotations

from dataclasses import dataclass

from auth.models import TokenPair
from auth.service import ACCESS_COOKIE, REFRESH_COOKIE


@dataclass(frozen=True)
class CookiePolicy:
    secure: bool = False
    samesite: str = "strict"
    httponly: bool = True


def set_token_cookies(response, tokens: TokenPair, policy: CookiePolicy) -> None:
    """Write both tokens as cookies on the response."""
    for name, value, max_age in (
        (ACCESS_COOKIE, tokens.access_token, tokens.access_expires_in),
        (REFRESH_COOKIE, tokens.refresh_token, tokens.refresh_expires_in),
    ):
        response.set_cookie(
            name,
            value=value,
            httponly=policy.httponly,
            samesite=policy.samesite,
            secure=policy.secure,
            max_age=max_age,
        )


def clear_token_cookies(response, names: tuple[str, ...], policy: CookiePolicy) -> None:
    """Expire the named cookies with the same attributes they were set with.

    Browsers only drop a cookie when the deleting Set-Cookie matches its
    path, secure and samesite attributes.
    """
    for name in names:
        response.delete_cookie(
            name,
            httponly=policy.httponly,
            samesite=policy.samesite,
            secure=policy.secure,
        )
