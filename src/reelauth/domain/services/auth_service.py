"""Authentication service.

Implements register, resend-email-verification, verify-email, login and
logout on top of the token service, the password hasher and the user
repository.

A user's verification state is ``user.email_verify_token``: non-null means
unverified (and holds the only token that can verify the account), null
means verified. Verified is terminal. Every write to that column goes
through a compare-and-set on the value the decision was based on.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from reelauth.core.logging import get_logger
from reelauth.domain.exceptions import (
    AlreadyVerifiedError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidTokenError,
    TooManyRequestsError,
    UserNotFoundError,
)
from reelauth.domain.services.registration_validator import (
    RegistrationValidator,
    default_registration_validator,
)
from reelauth.domain.services.resend_policy import ResendPolicy
from reelauth.infrastructure.auth.password_hasher import (
    DUMMY_PASSWORD_HASH,
    hash_password,
    needs_rehash,
    verify_password,
)
from reelauth.infrastructure.auth.token_service import TokenService
from reelauth.infrastructure.auth.token_types import AuthTokens, TokenType
from reelauth.infrastructure.persistence.models import UserModel
from reelauth.infrastructure.persistence.repositories import UserRepository, normalize_email
from reelauth.infrastructure.services.email_dispatcher import EmailDispatcher

logger = get_logger(__name__)


class AuthService:
    """Service for handling authentication business logic."""

    # Attempts at replacing a verification token when racing another resend
    MAX_RESEND_ATTEMPTS = 3

    def __init__(
        self,
        session: AsyncSession,
        user_repo: UserRepository,
        token_service: TokenService,
        resend_policy: ResendPolicy,
        email_dispatcher: EmailDispatcher,
        validator: RegistrationValidator = default_registration_validator,
    ) -> None:
        """Initialize the auth service.

        Args:
            session: SQLAlchemy async session; this service owns commits.
            user_repo: Repository for user operations.
            token_service: Issues and validates tokens.
            resend_policy: Debounce policy for verification emails.
            email_dispatcher: Outbound queue for verification emails.
            validator: Registration input validator.
        """
        self.session = session
        self.user_repo = user_repo
        self.token_service = token_service
        self.resend_policy = resend_policy
        self.email_dispatcher = email_dispatcher
        self.validator = validator

    async def register(
        self, email: str, name: str, password: str, confirm_password: str
    ) -> AuthTokens:
        """Create an unverified account and authenticate it.

        The user row, password digest and verification token are committed
        together before the verification email is queued.

        Raises:
            ValidationError: Input problems (all of them at once).
            DuplicateEmailError: The email is already registered.
        """
        self.validator.ensure_valid(email, name, password, confirm_password)

        email = normalize_email(email)
        name = name.strip()

        if await self.user_repo.email_exists(email):
            logger.info("Registration failed: email exists", email=email)
            raise DuplicateEmailError()

        user_id = str(uuid.uuid4())
        verify_token = self.token_service.issue(TokenType.EMAIL_VERIFY, user_id)
        user = UserModel(
            id=user_id,
            email=email,
            name=name,
            password_hash=hash_password(password),
            email_verify_token=verify_token,
        )

        try:
            await self.user_repo.create(user)
            await self.session.commit()
        except DuplicateEmailError:
            logger.info("Registration failed: email exists", email=email)
            raise
        except Exception:
            await self.session.rollback()
            raise

        logger.info("User registered", user_id=user_id, email=email)
        self.email_dispatcher.send_verification_email(email, name, verify_token)

        return self.token_service.issue_pair(user_id, is_verified=False)

    async def resend_email_verification(self, user_id: str) -> None:
        """Issue a fresh verification token and queue a new email.

        Raises:
            UserNotFoundError: No such user.
            AlreadyVerifiedError: The account is already verified.
            TooManyRequestsError: The previous token was issued less than the
                debounce window ago.
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError()

        for _ in range(self.MAX_RESEND_ATTEMPTS):
            current_token = user.email_verify_token
            if current_token is None:
                raise AlreadyVerifiedError()

            try:
                self.resend_policy.ensure_resend_allowed(current_token)
            except TooManyRequestsError as e:
                logger.info(
                    "Verification resend refused: cooling down",
                    user_id=user_id,
                    remaining_seconds=e.remaining_seconds,
                )
                raise

            new_token = self.token_service.issue(TokenType.EMAIL_VERIFY, user.id)
            if await self.user_repo.update_verify_token(user.id, new_token, expected=current_token):
                await self.session.commit()
                logger.info("Verification token reissued", user_id=user.id)
                self.email_dispatcher.send_verification_email(user.email, user.name, new_token)
                return

            # Another request replaced or cleared the token first
            logger.info("Verification resend lost a concurrent update", user_id=user.id)
            await self.session.refresh(user)

        raise TooManyRequestsError(self.resend_policy.debounce_seconds)

    async def verify_email(self, email_verify_token: str) -> AuthTokens:
        """Mark the account verified and return a verified token pair.

        Raises:
            InvalidTokenError: Bad token, or a token superseded by a resend.
            ExpiredTokenError: The token has expired.
            UserNotFoundError: The token's user does not exist.
            AlreadyVerifiedError: The account is already verified.
        """
        payload = self.token_service.verify_email_verify_token(email_verify_token)

        user = await self.user_repo.get_by_id(payload.user_id)
        if user is None:
            logger.info("Email verification failed: user not found", user_id=payload.user_id)
            raise UserNotFoundError()

        if user.is_verified:
            raise AlreadyVerifiedError("Email already verified")

        if user.email_verify_token != email_verify_token:
            logger.info("Email verification failed: token superseded", user_id=user.id)
            raise InvalidTokenError("Verification token is no longer valid")

        if not await self.user_repo.update_verify_token(user.id, None, expected=email_verify_token):
            await self.session.refresh(user)
            if user.is_verified:
                raise AlreadyVerifiedError("Email already verified")
            raise InvalidTokenError("Verification token is no longer valid")

        await self.session.commit()
        logger.info("Email verified", user_id=user.id, email=user.email)

        return self.token_service.issue_pair(user.id, is_verified=True)

    async def login(self, email: str, password: str) -> AuthTokens:
        """Authenticate with email and password.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password; the two
                cases are indistinguishable.
        """
        user = await self.user_repo.get_by_email(email)

        if user is None:
            # Burn the same hashing work as a real check
            verify_password(password, DUMMY_PASSWORD_HASH)
            logger.info("Login failed: user not found", email=normalize_email(email))
            raise InvalidCredentialsError()

        if not verify_password(password, user.password_hash):
            logger.info("Login failed: invalid password", user_id=user.id)
            raise InvalidCredentialsError()

        if needs_rehash(user.password_hash):
            await self.user_repo.update_password(user.id, hash_password(password))
            await self.session.commit()
            logger.info("Password digest upgraded", user_id=user.id)

        is_verified = user.is_verified
        logger.info("User logged in", user_id=user.id, is_verified=is_verified)
        return self.token_service.issue_pair(user.id, is_verified=is_verified)

    async def logout(self, refresh_token: str) -> None:
        """Acknowledge logout of a valid refresh token.

        Tokens are stateless; nothing is revoked server-side.

        Raises:
            InvalidTokenError: The refresh token is invalid.
            ExpiredTokenError: The refresh token has expired.
        """
        payload = self.token_service.verify_refresh_token(refresh_token)
        logger.info("User logged out", user_id=payload.user_id)
