"""
auth/dependencies.py -- FastAPI Depends() helpers for request authentication.

Two token sources are checked in priority order:
  1. "access_token" cookie -- set by register/login.
  2. Authorization: Bearer <token> header -- API clients.

Both converge on a User loaded fresh from the store, so a user deleted after
the token was issued is no longer authenticated.

try_get_current_user() is the soft variant (returns None on failure).
get_current_user() wraps it and raises HTTP 401 if unauthenticated.

Layer rule: no imports from api/ or core/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import User
from auth.service import ACCESS_COOKIE
from auth.store import UserStore
from auth.tokens import TokenIssuer


def try_get_current_user(request: Request) -> User | None:
    """Authenticate the request via cookie or Bearer header.

    Returns the User on success, None on any failure. Never raises.
    """
    user_store: UserStore = request.app.state.user_store
    issuer: TokenIssuer = request.app.state.token_issuer

    token: str | None = request.cookies.get(ACCESS_COOKIE)
    if not token:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token = auth_header[7:].strip()

    if not token:
        return None
    payload = issuer.decode(token)
    if payload is None:
        return None
    return user_store.find_by_id(payload["user_id"])


def get_current_user(request: Request) -> User:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user: User = Depends(get_current_user)): ...
    """
    user = try_get_current_user(request)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return user
