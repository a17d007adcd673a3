"""Domain services for ReelAuth.

Services contain business logic that doesn't naturally fit within a single entity.
"""

from reelauth.domain.services.registration_validator import (
    RegistrationValidator,
    default_registration_validator,
)
from reelauth.domain.services.resend_policy import ResendPolicy
from reelauth.domain.services.auth_service import AuthService

__all__ = [
    "AuthService",
    "RegistrationValidator",
    "ResendPolicy",
    "default_registration_validator",
]
