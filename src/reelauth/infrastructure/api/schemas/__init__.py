"""API request and response schemas."""

from reelauth.infrastructure.api.schemas.auth_schemas import (
    AuthResponse,
    AuthTokensResponse,
    EmailVerifyTokenRequest,
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    RefreshTokenRequest,
    RegisterRequest,
    ValidationErrorDetail,
)

__all__ = [
    "AuthResponse",
    "AuthTokensResponse",
    "EmailVerifyTokenRequest",
    "ErrorResponse",
    "LoginRequest",
    "MessageResponse",
    "RefreshTokenRequest",
    "RegisterRequest",
    "ValidationErrorDetail",
]
