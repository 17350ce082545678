"""
API request and response models for authsvc REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Request fields are Optional on purpose: a missing field is a business-level
BadRequest produced by AuthService (400), not a schema error (422). Pydantic
only rejects wrong types and oversized values.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import PublicUser

# Generous upper bound for any credential field. PasswordVerifier hashes only
# the first 72 bytes of a password; the cap keeps request bodies bounded.
_MAX_FIELD = 255


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register."""

    fullname: Optional[str] = Field(default=None, max_length=_MAX_FIELD)
    username: Optional[str] = Field(default=None, max_length=_MAX_FIELD)
    email: Optional[str] = Field(default=None, max_length=_MAX_FIELD)
    password: Optional[str] = Field(default=None, max_length=_MAX_FIELD)


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login. Either username or email is required."""

    username: Optional[str] = Field(default=None, max_length=_MAX_FIELD)
    email: Optional[str] = Field(default=None, max_length=_MAX_FIELD)
    password: Optional[str] = Field(default=None, max_length=_MAX_FIELD)


class ChangePasswordRequest(BaseModel):
    """Request body for POST /api/v1/auth/change-password."""

    old_password: Optional[str] = Field(default=None, max_length=_MAX_FIELD)
    new_password: Optional[str] = Field(default=None, max_length=_MAX_FIELD)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of a user. Never carries the password hash or refresh token."""

    model_config = ConfigDict(frozen=True)

    id: int
    fullname: str
    username: str
    email: str
    created_at: str
    updated_at: str

    @classmethod
    def from_public(cls, user: PublicUser) -> "UserResponse":
        return cls(
            id=user.id,
            fullname=user.fullname,
            username=user.username,
            email=user.email,
            created_at=user.created_at or "",
            updated_at=user.updated_at or "",
        )


class AuthResponse(BaseModel):
    """Response for register and login: the user plus both tokens.

    The tokens are also delivered as httpOnly cookies. They are repeated in the
    body for non-browser clients.
    """

    model_config = ConfigDict(frozen=True)

    user: UserResponse
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    message: str


class MeResponse(BaseModel):
    """Response for GET /api/v1/auth/me."""

    model_config = ConfigDict(frozen=True)

    user: UserResponse


class MessageResponse(BaseModel):
    """Empty-payload success (logout, change-password)."""

    model_config = ConfigDict(frozen=True)

    message: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
