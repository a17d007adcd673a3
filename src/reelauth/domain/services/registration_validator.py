"""Registration input validation.

Checks the registration fields and reports every problem at once:
- Name is required
- Email must look like an address
- Password and confirmation must be at least ``min_password_length`` long
- Confirmation must match the password
"""

import re

from reelauth.domain.exceptions import ValidationError, ValidationIssue

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class RegistrationValidator:
    """Validates registration input."""

    def __init__(self, min_password_length: int = 6) -> None:
        """Initialize the validator.

        Args:
            min_password_length: Minimum password length (default 6).
        """
        self.min_password_length = min_password_length

    def validate(
        self, email: str, name: str, password: str, confirm_password: str
    ) -> list[ValidationIssue]:
        """Validate registration fields.

        Returns:
            List of validation issues. Empty list if the input is valid.
        """
        issues: list[ValidationIssue] = []

        if not name or not name.strip():
            issues.append(
                ValidationIssue(field="name", message="Name is required", code="name_required")
            )

        if not EMAIL_PATTERN.match(email.strip()):
            issues.append(
                ValidationIssue(field="email", message="Invalid email address", code="email_invalid")
            )

        if len(password) < self.min_password_length:
            issues.append(
                ValidationIssue(
                    field="password",
                    message=f"Password must be at least {self.min_password_length} characters",
                    code="password_too_short",
                )
            )

        if len(confirm_password) < self.min_password_length:
            issues.append(
                ValidationIssue(
                    field="confirm_password",
                    message=f"confirm_password must be at least {self.min_password_length} characters",
                    code="confirm_password_too_short",
                )
            )

        if password != confirm_password:
            issues.append(
                ValidationIssue(
                    field="confirm_password",
                    message="Passwords do not match",
                    code="password_mismatch",
                )
            )

        return issues

    def ensure_valid(self, email: str, name: str, password: str, confirm_password: str) -> None:
        """Raise ``ValidationError`` carrying every issue found."""
        issues = self.validate(email, name, password, confirm_password)
        if issues:
            raise ValidationError(issues)


# Default validator instance
default_registration_validator = RegistrationValidator()
