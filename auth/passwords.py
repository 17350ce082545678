"""
auth/passwords.py -- bcrypt password hashing and verification.

Using bcrypt directly rather than passlib[bcrypt] because passlib's internal
wrap-bug detection creates a password longer than 72 bytes, which current
bcrypt releases reject with an explicit error.

bcrypt only reads the first 72 bytes of a password, and bcrypt>=5 raises
ValueError instead of ignoring the rest. Both hash() and verify() therefore
cut the UTF-8 encoding to 72 bytes themselves, so any password the API
accepts (up to 255 characters) hashes and verifies the same way on every
bcrypt release. Bytes past the 72nd do not contribute to the hash.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import bcrypt

BCRYPT_MAX_BYTES = 72


def _encode(raw_password: str) -> bytes:
    return raw_password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class PasswordVerifier:
    """Salted one-way hashing with a configurable bcrypt cost factor."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, raw_password: str) -> str:
        """Return a bcrypt hash of raw_password with a fresh salt."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_encode(raw_password), salt).decode("utf-8")

    def verify(self, raw_password: str, hashed: str | None) -> bool:
        """Return True if raw_password matches hashed.

        A mismatch is not an error. Malformed or missing hashes also return
        False: bcrypt raises ValueError for an invalid salt, which here just
        means "does not match".
        """
        if not hashed:
            return False
        try:
            return bcrypt.checkpw(_encode(raw_password), hashed.encode("utf-8"))
        except ValueError:
            return False
