"""Debounce policy for verification email resends.

The next resend is allowed ``debounce_seconds`` after the ``issued_at`` of
the currently stored verification token. Token expiry plays no part here:
an expired but recently issued token still enforces the cooldown.
"""

import math
from datetime import datetime, timedelta

from reelauth.core.clock import Clock, from_timestamp
from reelauth.core.logging import get_logger
from reelauth.domain.exceptions import InvalidTokenError, TooManyRequestsError
from reelauth.infrastructure.auth.token_service import TokenService
from reelauth.infrastructure.auth.token_types import TokenType

logger = get_logger(__name__)


class ResendPolicy:
    """Computes whether a verification email may be resent now."""

    def __init__(self, token_service: TokenService, clock: Clock, debounce_seconds: int) -> None:
        """Initialize the policy.

        Args:
            token_service: Used to read ``issued_at`` from the stored token.
            clock: Time source.
            debounce_seconds: Minimum spacing between two resends.
        """
        self._token_service = token_service
        self._clock = clock
        self.debounce_seconds = debounce_seconds

    def next_allowed_resend_time(self, current_token: str) -> datetime | None:
        """Return when the next resend is allowed.

        Returns None when the stored token cannot be decoded at all (for
        example after a secret rotation); such a token places no cooldown.
        """
        try:
            payload = self._token_service.decode_ignoring_expiry(
                TokenType.EMAIL_VERIFY, current_token
            )
        except InvalidTokenError:
            logger.warning("Stored verification token is unreadable; no cooldown applied")
            return None
        return from_timestamp(payload.issued_at) + timedelta(seconds=self.debounce_seconds)

    def remaining_cooldown(self, current_token: str) -> int:
        """Return the whole seconds left before a resend is allowed (0 if none)."""
        next_allowed = self.next_allowed_resend_time(current_token)
        if next_allowed is None:
            return 0
        remaining = (next_allowed - self._clock.now()).total_seconds()
        return max(0, math.ceil(remaining))

    def ensure_resend_allowed(self, current_token: str) -> None:
        """Raise ``TooManyRequestsError`` while the cooldown is active."""
        remaining = self.remaining_cooldown(current_token)
        if remaining > 0:
            raise TooManyRequestsError(remaining)
