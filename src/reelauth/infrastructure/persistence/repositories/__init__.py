"""Repository layer for database operations."""

from reelauth.infrastructure.persistence.repositories.user_repository import (
    UserRepository,
    normalize_email,
)

__all__ = ["UserRepository", "normalize_email"]
