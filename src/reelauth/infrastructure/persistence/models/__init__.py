"""SQLAlchemy ORM models."""

from reelauth.infrastructure.persistence.models.user import UserModel

__all__ = ["UserModel"]
