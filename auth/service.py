"""
auth/service.py -- The five user-facing authentication flows.

AuthService orchestrates UserStore, PasswordVerifier (through the store and
directly for verification), TokenIssuer and SessionRegistry. It receives
already-parsed input and returns an AuthResult:

  register        -> AuthSuccess(user, tokens)     | BadRequest, Conflict, InternalError
  login           -> AuthSuccess(user, tokens)     | BadRequest, NotFound, Unauthorized, InternalError
  logout          -> AuthSuccess(clear_cookies)    | InternalError
  change_password -> AuthSuccess()                 | BadRequest, NotFound, InternalError
  current_user    -> AuthSuccess(user)

Each flow fails fast on the first violated precondition. Expected failures
are returned, never raised. Unexpected persistence errors (SQLAlchemyError)
and token signing errors (TokenIssuanceError) are logged with traceback and
returned as InternalError with a generic message, so no storage or signing
detail crosses into api/.

Known non-atomic edge: register creates the user before issuing tokens. If
token issuance then fails, the user row exists and the caller gets
InternalError; a retry will see Conflict.

Layer rule: no imports from api/ or core/. Cookie attributes are not decided
here; logout only names the cookies to clear.
"""

from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from auth.errors import AuthFailure, AuthResult, AuthSuccess, DuplicateUserError, ErrorKind, TokenIssuanceError
from auth.models import User
from auth.passwords import PasswordVerifier
from auth.sessions import SessionRegistry
from auth.store import UserStore

logger = logging.getLogger("authsvc.auth")

ACCESS_COOKIE = "access_token"
REFRESH_COOKIE = "refresh_token"
TOKEN_COOKIES = (ACCESS_COOKIE, REFRESH_COOKIE)


def _present(value: str | None) -> bool:
    return bool(value and value.strip())


class AuthService:
    def __init__(self, store: UserStore, sessions: SessionRegistry, verifier: PasswordVerifier | None = None) -> None:
        self.store = store
        self.sessions = sessions
        self.verifier = verifier or store.verifier

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------

    def register(self, fullname: str | None, username: str | None, email: str | None, password: str | None) -> AuthResult:
        """Create a user and log them in."""
        return self._classified("register", lambda: self._register(fullname, username, email, password))

    def login(self, password: str | None, username: str | None = None, email: str | None = None) -> AuthResult:
        """Verify credentials by username or email and rotate the session."""
        return self._classified("login", lambda: self._login(password, username, email))

    def logout(self, user_id: int) -> AuthResult:
        """Revoke the stored refresh token. Idempotent."""
        return self._classified("logout", lambda: self._logout(user_id))

    def change_password(self, user_id: int, old_password: str | None, new_password: str | None) -> AuthResult:
        """Replace the password after checking the old one.

        The stored refresh token is left as is: existing sessions survive a
        password change.
        """
        return self._classified("change_password", lambda: self._change_password(user_id, old_password, new_password))

    def current_user(self, user: User) -> AuthResult:
        """Return the public view of an already-authenticated user."""
        return AuthSuccess(user=user.to_public())

    # ------------------------------------------------------------------
    # Flow bodies
    # ------------------------------------------------------------------

    def _register(self, fullname, username, email, password) -> AuthResult:
        if not all(_present(v) for v in (fullname, username, email, password)):
            return AuthFailure(ErrorKind.BAD_REQUEST, "All fields are required.")

        if self.store.find_by_login_identifier(username=username, email=email) is not None:
            return AuthFailure(ErrorKind.CONFLICT, "User already exists with this email or username.")

        try:
            user_id = self.store.create(fullname, username, email, password)
        except DuplicateUserError:
            # Lost a race with a concurrent registration for the same identifier.
            return AuthFailure(ErrorKind.CONFLICT, "User already exists with this email or username.")

        user = self.store.find_by_id(user_id)
        if user is None:
            return AuthFailure(ErrorKind.INTERNAL, "Something went wrong while creating the user.")

        tokens = self.sessions.establish(user)
        public = self.store.get_public_view(user_id)
        if public is None:
            return AuthFailure(ErrorKind.INTERNAL, "Something went wrong while creating the user.")
        logger.info("Registered user id=%s", user_id)
        return AuthSuccess(user=public, tokens=tokens)

    def _login(self, password, username, email) -> AuthResult:
        if not (_present(username) or _present(email)):
            return AuthFailure(ErrorKind.BAD_REQUEST, "Email or username is required.")
        if not _present(password):
            return AuthFailure(ErrorKind.BAD_REQUEST, "Password is required.")

        user = self.store.find_by_login_identifier(username=username, email=email)
        if user is None:
            return AuthFailure(ErrorKind.NOT_FOUND, "User does not exist.")

        if not self.verifier.verify(password, user.hashed_password):
            logger.info("Rejected login for user id=%s: bad password", user.id)
            return AuthFailure(ErrorKind.UNAUTHORIZED, "Invalid user credentials.")

        tokens = self.sessions.establish(user)
        public = self.store.get_public_view(user.id)
        if public is None:
            return AuthFailure(ErrorKind.INTERNAL, "Something went wrong while logging in.")
        logger.info("User id=%s logged in", user.id)
        return AuthSuccess(user=public, tokens=tokens)

    def _logout(self, user_id) -> AuthResult:
        self.sessions.revoke(user_id)
        logger.info("User id=%s logged out", user_id)
        return AuthSuccess(clear_cookies=TOKEN_COOKIES)

    def _change_password(self, user_id, old_password, new_password) -> AuthResult:
        if not (_present(old_password) and _present(new_password)):
            return AuthFailure(ErrorKind.BAD_REQUEST, "Old and new password are required.")

        user = self.store.find_by_id(user_id)
        if user is None:
            return AuthFailure(ErrorKind.NOT_FOUND, "User does not exist.")

        if not self.verifier.verify(old_password, user.hashed_password):
            return AuthFailure(ErrorKind.BAD_REQUEST, "Invalid old password.")

        self.store.set_password(user_id, new_password)
        logger.info("User id=%s changed password", user_id)
        return AuthSuccess()

    # ------------------------------------------------------------------
    # Failure classification
    # ------------------------------------------------------------------

    def _classified(self, flow: str, body: Callable[[], AuthResult]) -> AuthResult:
        try:
            return body()
        except TokenIssuanceError:
            logger.exception("%s: token generation failed", flow)
            return AuthFailure(ErrorKind.INTERNAL, "Token generation failed - internal server error.")
        except SQLAlchemyError:
            logger.exception("%s: persistence failure", flow)
            return AuthFailure(ErrorKind.INTERNAL, "An unexpected error occurred.")
