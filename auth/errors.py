"""
auth/errors.py -- Error kinds, flow results, and internal auth exceptions.

AuthService flows never raise for expected failures. They return either
AuthSuccess or AuthFailure and the caller branches on the result:

    result = service.login(password="...", username="ada")
    if isinstance(result, AuthFailure):
        status = STATUS_BY_KIND[result.kind]

The two exception classes below are internal signals between auth/ modules.
AuthService converts them into AuthFailure before anything reaches api/.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from auth.models import PublicUser, TokenPair


class ErrorKind(str, Enum):
    BAD_REQUEST = "bad_request"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    INTERNAL = "internal_error"


@dataclass(frozen=True)
class AuthSuccess:
    """Successful flow outcome.

    user and tokens are None for flows with an empty payload (logout,
    change-password). clear_cookies names the token cookies the delivery
    layer must remove (set by logout only).
    """

    user: PublicUser | None = None
    tokens: TokenPair | None = None
    clear_cookies: tuple[str, ...] = ()


@dataclass(frozen=True)
class AuthFailure:
    """Classified flow failure. message is safe to show to the client."""

    kind: ErrorKind
    message: str


AuthResult = Union[AuthSuccess, AuthFailure]


class DuplicateUserError(Exception):
    """Raised by UserStore.create when username or email already exists."""


class TokenIssuanceError(Exception):
    """Raised by TokenIssuer when a token cannot be signed.

    Covers a missing signing key and any encoder failure. The original cause
    is chained for the server log; clients only ever see InternalError.
    """
