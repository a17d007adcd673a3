"""Unit tests for AuthService against an in-memory database and a frozen clock."""

from unittest.mock import patch

import pytest
from sqlalchemy import text

from reelauth.domain.exceptions import (
    AlreadyVerifiedError,
    DuplicateEmailError,
    ExpiredTokenError,
    InvalidCredentialsError,
    InvalidTokenError,
    TooManyRequestsError,
    UserNotFoundError,
    ValidationError,
)
from reelauth.infrastructure.auth.token_types import TokenType

EMAIL = "alice@example.com"
PASSWORD = "secret1"


async def register(auth_service, email=EMAIL, password=PASSWORD):
    return await auth_service.register(
        email=email, name="Alice", password=password, confirm_password=password
    )


async def stored_token(user_repo, email=EMAIL):
    user = await user_repo.get_by_email(email)
    return user.email_verify_token


class TestRegister:
    """Tests for registration."""

    @pytest.mark.asyncio
    async def test_register_returns_unverified_tokens(self, auth_service, token_service):
        tokens = await register(auth_service)

        access = token_service.verify_access_token(tokens.access_token)
        refresh = token_service.verify_refresh_token(tokens.refresh_token)
        assert access.is_verified is False
        assert refresh.is_verified is False
        assert access.user_id == refresh.user_id

    @pytest.mark.asyncio
    async def test_register_stores_user_with_pending_token(
        self, auth_service, user_repo, token_service
    ):
        tokens = await register(auth_service, email="  Alice@Example.com ")

        user = await user_repo.get_by_email(EMAIL)
        assert user is not None
        assert user.email == EMAIL
        assert user.name == "Alice"
        assert user.password_hash != PASSWORD
        assert user.is_verified is False
        payload = token_service.verify_email_verify_token(user.email_verify_token)
        assert payload.user_id == user.id
        assert token_service.verify_access_token(tokens.access_token).user_id == user.id

    @pytest.mark.asyncio
    async def test_register_queues_verification_email(
        self, auth_service, user_repo, email_dispatcher, email_provider
    ):
        await register(auth_service)

        assert email_dispatcher.pending == 1
        await email_dispatcher.drain()
        kwargs = email_provider.send_email.call_args.kwargs
        assert kwargs["to"] == EMAIL
        assert await stored_token(user_repo) in kwargs["text_body"]

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, auth_service, email_dispatcher):
        await register(auth_service)

        with pytest.raises(DuplicateEmailError):
            await register(auth_service, email="ALICE@example.com")

        assert email_dispatcher.pending == 1

    @pytest.mark.asyncio
    async def test_register_duplicate_detected_by_constraint(self, auth_service, user_repo):
        """A concurrent registration that slips past the existence check still fails cleanly."""
        await register(auth_service)

        with patch.object(user_repo, "email_exists", return_value=False):
            with pytest.raises(DuplicateEmailError):
                await register(auth_service)

    @pytest.mark.asyncio
    async def test_register_password_mismatch(self, auth_service, user_repo, email_dispatcher):
        with pytest.raises(ValidationError) as exc_info:
            await auth_service.register(
                email=EMAIL, name="Alice", password="secret1", confirm_password="secret2"
            )

        issue = exc_info.value.issues[0]
        assert issue.field == "confirm_password"
        assert issue.message == "Passwords do not match"
        assert await user_repo.get_by_email(EMAIL) is None
        assert email_dispatcher.pending == 0


class TestResendEmailVerification:
    """Tests for resending the verification email."""

    @pytest.mark.asyncio
    async def test_resend_immediately_is_refused(self, auth_service, user_repo, token_service):
        tokens = await register(auth_service)
        user_id = token_service.verify_access_token(tokens.access_token).user_id

        with pytest.raises(TooManyRequestsError) as exc_info:
            await auth_service.resend_email_verification(user_id)

        assert exc_info.value.remaining_seconds == 60

    @pytest.mark.asyncio
    async def test_remaining_seconds_shrink(self, auth_service, token_service, clock):
        tokens = await register(auth_service)
        user_id = token_service.verify_access_token(tokens.access_token).user_id

        clock.advance(seconds=20)

        with pytest.raises(TooManyRequestsError) as exc_info:
            await auth_service.resend_email_verification(user_id)
        assert exc_info.value.remaining_seconds == 40

    @pytest.mark.asyncio
    async def test_resend_after_cooldown_replaces_token(
        self, auth_service, user_repo, token_service, email_dispatcher, clock
    ):
        tokens = await register(auth_service)
        user_id = token_service.verify_access_token(tokens.access_token).user_id
        old_token = await stored_token(user_repo)

        clock.advance(seconds=60)
        await auth_service.resend_email_verification(user_id)

        new_token = await stored_token(user_repo)
        assert new_token != old_token
        assert email_dispatcher.pending == 2
        payload = token_service.verify_email_verify_token(new_token)
        assert payload.issued_at == int(clock.now().timestamp())

    @pytest.mark.asyncio
    async def test_resend_restarts_cooldown(self, auth_service, token_service, clock):
        tokens = await register(auth_service)
        user_id = token_service.verify_access_token(tokens.access_token).user_id

        clock.advance(seconds=61)
        await auth_service.resend_email_verification(user_id)

        clock.advance(seconds=10)
        with pytest.raises(TooManyRequestsError) as exc_info:
            await auth_service.resend_email_verification(user_id)
        assert exc_info.value.remaining_seconds == 50

    @pytest.mark.asyncio
    async def test_resend_allowed_after_token_expired(self, auth_service, user_repo, clock):
        await register(auth_service)
        user = await user_repo.get_by_email(EMAIL)
        old_token = user.email_verify_token

        clock.advance(days=8)
        await auth_service.resend_email_verification(user.id)

        assert await stored_token(user_repo) not in (None, old_token)

    @pytest.mark.asyncio
    async def test_resend_unknown_user(self, auth_service):
        with pytest.raises(UserNotFoundError):
            await auth_service.resend_email_verification("missing")

    @pytest.mark.asyncio
    async def test_resend_after_verification(self, auth_service, user_repo, clock):
        await register(auth_service)
        user = await user_repo.get_by_email(EMAIL)
        await auth_service.verify_email(user.email_verify_token)

        clock.advance(seconds=120)
        with pytest.raises(AlreadyVerifiedError):
            await auth_service.resend_email_verification(user.id)

    @pytest.mark.asyncio
    async def test_resend_retries_after_losing_update(
        self, auth_service, user_repo, email_dispatcher, clock
    ):
        await register(auth_service)
        user = await user_repo.get_by_email(EMAIL)
        clock.advance(seconds=60)

        with patch.object(
            user_repo, "update_verify_token", side_effect=[False, True]
        ) as update:
            await auth_service.resend_email_verification(user.id)

        assert update.await_count == 2
        assert email_dispatcher.pending == 2

    @pytest.mark.asyncio
    async def test_resend_gives_up_after_repeated_lost_updates(
        self, auth_service, user_repo, email_dispatcher, clock
    ):
        await register(auth_service)
        user = await user_repo.get_by_email(EMAIL)
        clock.advance(seconds=60)

        with patch.object(user_repo, "update_verify_token", return_value=False) as update:
            with pytest.raises(TooManyRequestsError):
                await auth_service.resend_email_verification(user.id)

        assert update.await_count == auth_service.MAX_RESEND_ATTEMPTS
        assert email_dispatcher.pending == 1


class TestVerifyEmail:
    """Tests for email verification."""

    @pytest.mark.asyncio
    async def test_verify_email(self, auth_service, user_repo, token_service):
        await register(auth_service)
        token = await stored_token(user_repo)

        tokens = await auth_service.verify_email(token)

        assert token_service.verify_access_token(tokens.access_token).is_verified is True
        assert token_service.verify_refresh_token(tokens.refresh_token).is_verified is True
        user = await user_repo.get_by_email(EMAIL)
        assert user.email_verify_token is None
        assert user.is_verified is True

    @pytest.mark.asyncio
    async def test_verify_twice(self, auth_service, user_repo):
        await register(auth_service)
        token = await stored_token(user_repo)
        await auth_service.verify_email(token)

        with pytest.raises(AlreadyVerifiedError):
            await auth_service.verify_email(token)

    @pytest.mark.asyncio
    async def test_superseded_token_is_rejected(self, auth_service, user_repo, clock):
        await register(auth_service)
        user = await user_repo.get_by_email(EMAIL)
        old_token = user.email_verify_token

        clock.advance(seconds=60)
        await auth_service.resend_email_verification(user.id)

        with pytest.raises(InvalidTokenError):
            await auth_service.verify_email(old_token)
        assert user.is_verified is False

        await auth_service.verify_email(user.email_verify_token)
        assert user.is_verified is True

    @pytest.mark.asyncio
    async def test_expired_token(self, auth_service, user_repo, clock):
        await register(auth_service)
        token = await stored_token(user_repo)

        clock.advance(days=7, seconds=1)

        with pytest.raises(ExpiredTokenError):
            await auth_service.verify_email(token)

    @pytest.mark.asyncio
    async def test_token_of_wrong_kind(self, auth_service):
        tokens = await register(auth_service)

        with pytest.raises(InvalidTokenError):
            await auth_service.verify_email(tokens.access_token)

    @pytest.mark.asyncio
    async def test_unknown_user(self, auth_service, token_service):
        token = token_service.issue(TokenType.EMAIL_VERIFY, "missing")

        with pytest.raises(UserNotFoundError):
            await auth_service.verify_email(token)

    @pytest.mark.asyncio
    async def test_lost_update_to_concurrent_verification(
        self, auth_service, user_repo, db_session
    ):
        await register(auth_service)
        user = await user_repo.get_by_email(EMAIL)
        token = user.email_verify_token

        async def verified_elsewhere(user_id, new_token, *, expected):
            await db_session.execute(
                text("UPDATE users SET email_verify_token = NULL WHERE id = :id"),
                {"id": user_id},
            )
            return False

        with patch.object(user_repo, "update_verify_token", side_effect=verified_elsewhere):
            with pytest.raises(AlreadyVerifiedError):
                await auth_service.verify_email(token)


class TestLogin:
    """Tests for login."""

    @pytest.mark.asyncio
    async def test_login_unverified(self, auth_service, token_service):
        await register(auth_service)

        tokens = await auth_service.login(EMAIL, PASSWORD)

        assert token_service.verify_access_token(tokens.access_token).is_verified is False

    @pytest.mark.asyncio
    async def test_login_verified(self, auth_service, user_repo, token_service):
        await register(auth_service)
        await auth_service.verify_email(await stored_token(user_repo))

        tokens = await auth_service.login("ALICE@example.com", PASSWORD)

        assert token_service.verify_access_token(tokens.access_token).is_verified is True
        assert token_service.verify_refresh_token(tokens.refresh_token).is_verified is True

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_the_same(self, auth_service):
        await register(auth_service)

        with pytest.raises(InvalidCredentialsError) as wrong_password:
            await auth_service.login(EMAIL, "wrong-password")
        with pytest.raises(InvalidCredentialsError) as unknown_email:
            await auth_service.login("bob@example.com", PASSWORD)

        assert wrong_password.value.issues == unknown_email.value.issues
        assert wrong_password.value.message == unknown_email.value.message
        assert wrong_password.value.issues[0].field == "email"

    @pytest.mark.asyncio
    async def test_login_upgrades_outdated_digest(self, auth_service, user_repo):
        await register(auth_service)

        with patch(
            "reelauth.domain.services.auth_service.needs_rehash", return_value=True
        ), patch.object(user_repo, "update_password", return_value=True) as update:
            await auth_service.login(EMAIL, PASSWORD)

        update.assert_awaited_once()


class TestLogout:
    """Tests for logout."""

    @pytest.mark.asyncio
    async def test_logout_with_refresh_token(self, auth_service):
        tokens = await register(auth_service)

        await auth_service.logout(tokens.refresh_token)

    @pytest.mark.asyncio
    async def test_logout_with_access_token(self, auth_service):
        tokens = await register(auth_service)

        with pytest.raises(InvalidTokenError):
            await auth_service.logout(tokens.access_token)

    @pytest.mark.asyncio
    async def test_logout_with_expired_refresh_token(self, auth_service, clock):
        tokens = await register(auth_service)

        clock.advance(days=101)

        with pytest.raises(ExpiredTokenError):
            await auth_service.logout(tokens.refresh_token)
