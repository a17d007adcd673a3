"""Typed failures raised by the authentication core.

Every failure a caller can observe is an ``AuthError`` subclass. The core
never maps these to transport concepts; the HTTP layer does that in a
single exception handler.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidationIssue:
    """A single field-level validation problem.

    Attributes:
        field: Path of the offending field (e.g. ``confirm_password``).
        message: Human-readable error message.
        code: Machine-readable error code.
    """

    field: str
    message: str
    code: str = "invalid"


class AuthError(Exception):
    """Base class for all authentication errors."""

    code = "auth_error"
    default_message = "Authentication error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthError):
    """One or more field-level issues with the caller's input."""

    code = "validation_error"
    default_message = "Validation error"

    def __init__(self, issues: list[ValidationIssue], message: str | None = None) -> None:
        if not issues:
            raise ValueError("ValidationError requires at least one issue")
        self.issues = list(issues)
        super().__init__(message)


class InvalidCredentialsError(ValidationError):
    """Login failed.

    Raised with the same single issue for an unknown email and for a wrong
    password, so the two causes cannot be told apart.
    """

    code = "invalid_credentials"
    ISSUE = ValidationIssue(
        field="email",
        message="Invalid email or password",
        code="invalid_credentials",
    )

    def __init__(self) -> None:
        super().__init__([self.ISSUE], message="Invalid email or password")


class DuplicateEmailError(AuthError):
    """An account with this email already exists."""

    code = "duplicate_email"
    default_message = "Email already exists"


class UserNotFoundError(AuthError):
    """The user targeted by the operation does not exist."""

    code = "user_not_found"
    default_message = "User not found"


class AlreadyVerifiedError(AuthError):
    """Resend or verify attempted on an already verified account."""

    code = "already_verified"
    default_message = "Account has been verified"


class TooManyRequestsError(AuthError):
    """Verification email resend is still cooling down."""

    code = "too_many_requests"

    def __init__(self, remaining_seconds: int) -> None:
        self.remaining_seconds = remaining_seconds
        super().__init__(f"Please try again in {remaining_seconds} seconds")


class TokenError(AuthError):
    """Base class for token codec failures."""

    code = "token_error"


class InvalidTokenError(TokenError):
    """Token is malformed, has a bad signature or is of the wrong kind."""

    code = "invalid_token"
    default_message = "Invalid token"


class ExpiredTokenError(TokenError):
    """Token signature is valid but the token has expired."""

    code = "expired_token"
    default_message = "Token has expired"
