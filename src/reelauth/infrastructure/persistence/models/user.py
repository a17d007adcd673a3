"""SQLAlchemy model for the users table.

``email_verify_token`` is the only persisted verification flag: a non-null
value means the account is unverified and holds the currently valid
verification token; null means verified.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from reelauth.infrastructure.persistence.database import Base


class UserModel(Base):
    """SQLAlchemy model for the users table.

    Attributes:
        id: Primary key (UUID string).
        email: Lower-cased email address, unique.
        name: Display name.
        password_hash: Argon2 digest of the password.
        email_verify_token: Current verification token, null once verified.
        created_at: Timestamp when the user was created.
        updated_at: Timestamp when the user was last updated.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment="User ID (UUID)",
    )
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="User email address (lower-cased)",
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Display name",
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Hashed password (argon2)",
    )
    email_verify_token: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Pending email verification token; null once verified",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    @property
    def is_verified(self) -> bool:
        """Whether the user has verified their email address."""
        return self.email_verify_token is None

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, verified={self.is_verified})>"
