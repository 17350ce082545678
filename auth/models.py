"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, no I/O). Stores and the service do
the work; these classes only own the shape of a user and a token pair.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered identity as stored in the users table.

    username and email are stored stripped and lower-cased; both are UNIQUE.
    hashed_password and refresh_token are secrets: they must never leave the
    auth package. Use to_public() (or UserStore.get_public_view) for anything
    that is returned to a client.

    refresh_token holds the most recently issued refresh token, or None when
    the user is logged out.
    """

    fullname: str
    username: str
    email: str
    hashed_password: str
    id: int | None = None
    refresh_token: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    def to_public(self) -> PublicUser:
        return PublicUser(
            id=self.id,
            fullname=self.fullname,
            username=self.username,
            email=self.email,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


@dataclass(frozen=True)
class PublicUser:
    """Outward view of a User. Has no password hash or refresh token field."""

    id: int | None
    fullname: str
    username: str
    email: str
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class TokenPair:
    """An access/refresh token pair plus lifetimes in seconds.

    The lifetimes let the delivery layer set cookie max_age equal to token
    expiry without re-reading configuration.
    """

    access_token: str
    refresh_token: str
    access_expires_in: int
    refresh_expires_in: int
