"""User repository for database operations."""

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reelauth.core.logging import get_logger
from reelauth.domain.exceptions import DuplicateEmailError
from reelauth.infrastructure.persistence.models import UserModel

logger = get_logger(__name__)

_UNSET: Any = object()


def normalize_email(email: str) -> str:
    """Return the canonical (trimmed, lower-cased) form of an email."""
    return email.strip().lower()


class UserRepository:
    """Repository for user database operations.

    Methods flush but never commit; the calling service owns the transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, user: UserModel) -> UserModel:
        """Create a new user.

        Args:
            user: User model to create.

        Returns:
            Created user model.

        Raises:
            DuplicateEmailError: If the email is already taken.
        """
        user.email = normalize_email(user.email)
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            logger.info("User insert rejected by unique constraint", email=user.email)
            raise DuplicateEmailError() from e
        return user

    async def get_by_id(self, user_id: str) -> UserModel | None:
        """Get a user by ID.

        Args:
            user_id: User ID (UUID string).

        Returns:
            User model if found, None otherwise.
        """
        result = await self.session.execute(
            select(UserModel).where(UserModel.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> UserModel | None:
        """Get a user by email (case-insensitive).

        Args:
            email: User's email address.

        Returns:
            User model if found, None otherwise.
        """
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        """Check if an email is already registered."""
        result = await self.session.execute(
            select(UserModel.id)
            .where(UserModel.email == normalize_email(email))
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def update_verify_token(
        self,
        user_id: str,
        token: str | None,
        *,
        expected: str | None = _UNSET,
    ) -> bool:
        """Replace or clear the stored email verification token.

        When ``expected`` is given the write is a compare-and-set: it only
        applies if the stored token still equals ``expected``.

        Args:
            user_id: ID of the user to update.
            token: New token, or None to mark the account verified.
            expected: Token value the caller based its decision on.

        Returns:
            True if a row was updated, False if the user is missing or the
            stored token no longer matches ``expected``.
        """
        stmt = update(UserModel).where(UserModel.id == user_id)
        if expected is not _UNSET:
            if expected is None:
                stmt = stmt.where(UserModel.email_verify_token.is_(None))
            else:
                stmt = stmt.where(UserModel.email_verify_token == expected)

        result = await self.session.execute(
            stmt.values(email_verify_token=token).execution_options(synchronize_session="evaluate")
        )
        await self.session.flush()
        return result.rowcount == 1

    async def update_password(self, user_id: str, password_hash: str) -> bool:
        """Store a new password digest.

        Args:
            user_id: ID of the user to update.
            password_hash: Output of the password hasher.

        Returns:
            True if the user existed and was updated.
        """
        result = await self.session.execute(
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(password_hash=password_hash)
            .execution_options(synchronize_session="evaluate")
        )
        await self.session.flush()
        return result.rowcount == 1
