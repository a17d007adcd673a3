"""Infrastructure services."""

from reelauth.infrastructure.services.email_dispatcher import EmailDispatcher, VerificationEmail

__all__ = ["EmailDispatcher", "VerificationEmail"]
