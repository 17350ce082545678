"""
api/routes/v1/auth.py -- Authentication REST endpoints.

Routes:
  POST /api/v1/auth/register         -- create user, log in; sets token cookies
  POST /api/v1/auth/login            -- username or email + password; sets token cookies
  POST /api/v1/auth/logout           -- revoke refresh token; clears token cookies (requires auth)
  POST /api/v1/auth/change-password  -- verify old password, store new one (requires auth)
  GET  /api/v1/auth/me               -- current user info (requires auth)

Handlers are thin: they hand parsed input to AuthService and render the
AuthResult. An AuthFailure becomes an HTTPException whose detail is the
structured error dict; api/main.py renders it in the ErrorResponse envelope.

Request bodies are optional. An absent body is read as an empty model, so
AuthService reports the missing fields as BadRequest (400) rather than
FastAPI answering 422.

Handlers are plain `def` because the store is synchronous SQLAlchemy;
Starlette runs them in its thread pool.

Security:
  Cache-Control: no-store on every response that carries tokens.
  Cookie attributes come from app.state.cookie_policy (built at startup).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from api.models import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    MeResponse,
    MessageResponse,
    RegisterRequest,
    UserResponse,
)
from auth.cookies import CookiePolicy, clear_token_cookies, set_token_cookies
from auth.dependencies import get_current_user
from auth.errors import AuthFailure, AuthResult, AuthSuccess, ErrorKind
from auth.models import User
from auth.service import AuthService

# Auth policy:
# - POST /api/v1/auth/register:        public
# - POST /api/v1/auth/login:           public
# - POST /api/v1/auth/logout:          requires auth (get_current_user)
# - POST /api/v1/auth/change-password: requires auth (get_current_user)
# - GET  /api/v1/auth/me:              requires auth (get_current_user)
router = APIRouter()

_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/register", response_model=AuthResponse, status_code=201)
def register(request: Request, body: RegisterRequest | None = None) -> JSONResponse:
    """Create a user and log them in. Username and email must be unused."""
    body = body or RegisterRequest()
    result = _service(request).register(body.fullname, body.username, body.email, body.password)
    return _session_response(request, _unwrap(result), 201, "User registered and logged in successfully.")


@router.post("/auth/login", response_model=AuthResponse)
def login(request: Request, body: LoginRequest | None = None) -> JSONResponse:
    """Authenticate with username or email plus password.

    An unknown identifier is 404 and a wrong password is 401; clients can
    tell the two apart.
    """
    body = body or LoginRequest()
    result = _service(request).login(body.password, username=body.username, email=body.email)
    return _session_response(request, _unwrap(result), 200, "User logged in successfully.")


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/logout", response_model=MessageResponse)
def logout(request: Request, current_user: User = Depends(get_current_user)) -> JSONResponse:
    """Revoke the stored refresh token and clear both token cookies."""
    success = _unwrap(_service(request).logout(current_user.id))
    resp = JSONResponse(content=MessageResponse(message="User logged out.").model_dump())
    clear_token_cookies(resp, success.clear_cookies, _cookie_policy(request))
    return resp


@router.post("/auth/change-password", response_model=MessageResponse)
def change_password(
    request: Request,
    body: ChangePasswordRequest | None = None,
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    """Change the current user's password. Existing sessions stay valid."""
    body = body or ChangePasswordRequest()
    _unwrap(_service(request).change_password(current_user.id, body.old_password, body.new_password))
    return MessageResponse(message="Password changed successfully.")


@router.get("/auth/me", response_model=MeResponse)
def me(request: Request, current_user: User = Depends(get_current_user)) -> MeResponse:
    """Return the public view of the currently authenticated user."""
    success = _unwrap(_service(request).current_user(current_user))
    return MeResponse(user=UserResponse.from_public(success.user))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _service(request: Request) -> AuthService:
    return request.app.state.auth_service


def _cookie_policy(request: Request) -> CookiePolicy:
    return request.app.state.cookie_policy


def _unwrap(result: AuthResult) -> AuthSuccess:
    """Return the success value or raise the HTTPException for a failure."""
    if isinstance(result, AuthFailure):
        raise HTTPException(
            status_code=_STATUS_BY_KIND[result.kind],
            detail={"code": result.kind.value, "message": result.message},
        )
    return result


def _session_response(request: Request, success: AuthSuccess, status_code: int, message: str) -> JSONResponse:
    tokens = success.tokens
    resp = JSONResponse(
        status_code=status_code,
        content=AuthResponse(
            user=UserResponse.from_public(success.user),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=tokens.access_expires_in,
            message=message,
        ).model_dump(),
    )
    set_token_cookies(resp, tokens, _cookie_policy(request))
    resp.headers["Cache-Control"] = "no-store"
    return resp
