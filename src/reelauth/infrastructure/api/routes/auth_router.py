"""Authentication API routes.

Provides endpoints for registration, email verification, login and logout.
Failures are raised as domain exceptions and rendered by the handlers
registered in ``reelauth.infrastructure.api.app``.
"""

from fastapi import APIRouter, status

from reelauth.core.logging import get_logger
from reelauth.domain.exceptions import AlreadyVerifiedError
from reelauth.infrastructure.api.dependencies import AccessTokenDep, AuthServiceDep
from reelauth.infrastructure.api.schemas import (
    AuthResponse,
    AuthTokensResponse,
    EmailVerifyTokenRequest,
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    RefreshTokenRequest,
    RegisterRequest,
)

logger = get_logger(__name__)

router = APIRouter()

CHECK_EMAIL_MESSAGE = "Please check your email to verify your account."


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthResponse,
    responses={
        409: {"model": ErrorResponse, "description": "Email already exists"},
        422: {"model": ErrorResponse, "description": "Invalid value or missing field"},
    },
)
async def register(request: RegisterRequest, auth_service: AuthServiceDep) -> AuthResponse:
    """Register a new user.

    The caller is authenticated immediately, with tokens flagged unverified,
    and a verification email is queued.
    """
    tokens = await auth_service.register(
        email=request.email,
        name=request.name,
        password=request.password,
        confirm_password=request.confirm_password,
    )
    return AuthResponse(
        message=CHECK_EMAIL_MESSAGE,
        data=AuthTokensResponse(**tokens.model_dump()),
    )


@router.post(
    "/resend-email-verification",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Account has been verified"},
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        404: {"model": ErrorResponse, "description": "User not found"},
        429: {"model": ErrorResponse, "description": "Too many requests"},
    },
)
async def resend_email_verification(
    access_token: AccessTokenDep, auth_service: AuthServiceDep
) -> MessageResponse:
    """Resend the verification email for the authenticated user."""
    if access_token.is_verified:
        raise AlreadyVerifiedError()

    await auth_service.resend_email_verification(access_token.user_id)
    return MessageResponse(message=CHECK_EMAIL_MESSAGE)


@router.post(
    "/verify-email",
    response_model=AuthResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Email already verified"},
        401: {"model": ErrorResponse, "description": "Invalid or expired token"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def verify_email(
    request: EmailVerifyTokenRequest, auth_service: AuthServiceDep
) -> AuthResponse:
    """Verify the email address using the token from the verification email."""
    tokens = await auth_service.verify_email(request.email_verify_token)
    return AuthResponse(
        message="Email verified successfully",
        data=AuthTokensResponse(**tokens.model_dump()),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        422: {"model": ErrorResponse, "description": "Invalid email or password"},
    },
)
async def login(request: LoginRequest, auth_service: AuthServiceDep) -> AuthResponse:
    """Authenticate with email and password."""
    tokens = await auth_service.login(request.email, request.password)
    return AuthResponse(
        message="Login successful",
        data=AuthTokensResponse(**tokens.model_dump()),
    )


@router.post(
    "/logout",
    response_model=MessageResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized"},
    },
)
async def logout(request: RefreshTokenRequest, auth_service: AuthServiceDep) -> MessageResponse:
    """Log out using a refresh token."""
    await auth_service.logout(request.refresh_token)
    return MessageResponse(message="Logout successful")
