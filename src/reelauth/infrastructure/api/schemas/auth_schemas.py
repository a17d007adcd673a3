"""Pydantic schemas for authentication endpoints.

Field-level rules (lengths, matching confirmation) are enforced by the
registration validator so that all issues are reported together; these
schemas only describe shape.
"""

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    """Request body for registration."""

    model_config = {"extra": "forbid"}

    name: str = Field(..., description="Display name")
    email: str = Field(..., description="User's email address")
    password: str = Field(..., description="User's password")
    confirm_password: str = Field(..., description="Repeat of the password")


class LoginRequest(BaseModel):
    """Request body for login."""

    email: str = Field(..., min_length=1, description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")


class EmailVerifyTokenRequest(BaseModel):
    """Request body for email verification."""

    email_verify_token: str = Field(..., min_length=1, description="Email verification token")


class RefreshTokenRequest(BaseModel):
    """Request body carrying a refresh token."""

    refresh_token: str = Field(..., min_length=1, description="JWT refresh token")


class AuthTokensResponse(BaseModel):
    """Access/refresh token pair."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")


class AuthResponse(BaseModel):
    """Response for operations that authenticate the caller."""

    message: str
    data: AuthTokensResponse


class MessageResponse(BaseModel):
    """Response carrying only a message."""

    message: str


class ValidationErrorDetail(BaseModel):
    """Detail for a single validation error."""

    field: str = Field(..., description="Field name that failed validation")
    message: str = Field(..., description="Human-readable error message")
    code: str = Field(..., description="Machine-readable error code")


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str
    message: str
    details: list[ValidationErrorDetail] | None = None
    remaining_seconds: int | None = None
