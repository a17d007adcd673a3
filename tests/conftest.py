"""Pytest configuration for all tests."""

from datetime import datetime, timezone
from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from reelauth.core.clock import FrozenClock
from reelauth.core.config import TokenSettings
from reelauth.domain.services import AuthService, ResendPolicy
from reelauth.infrastructure.auth.token_service import TokenService
from reelauth.infrastructure.persistence.database import Base
from reelauth.infrastructure.persistence.models import UserModel  # noqa: F401
from reelauth.infrastructure.persistence.repositories import UserRepository
from reelauth.infrastructure.services.email_dispatcher import EmailDispatcher

DEBOUNCE_SECONDS = 60


@pytest.fixture
def clock() -> FrozenClock:
    """Clock frozen at a fixed instant; tests advance it explicitly."""
    return FrozenClock(datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def token_settings() -> TokenSettings:
    return TokenSettings(
        access_secret="test-access-secret",
        refresh_secret="test-refresh-secret",
        email_verify_secret="test-email-verify-secret",
        access_lifetime_seconds=900,
        refresh_lifetime_seconds=100 * 24 * 3600,
        email_verify_lifetime_seconds=7 * 24 * 3600,
        issuer="reelauth",
    )


@pytest.fixture
def token_service(token_settings: TokenSettings, clock: FrozenClock) -> TokenService:
    return TokenService(token_settings, clock)


@pytest.fixture
def resend_policy(token_service: TokenService, clock: FrozenClock) -> ResendPolicy:
    return ResendPolicy(token_service, clock, DEBOUNCE_SECONDS)


@pytest.fixture
def email_provider() -> AsyncMock:
    """Email provider mock that accepts every message."""
    provider = AsyncMock()
    provider.send_email.return_value = True
    return provider


@pytest.fixture
def email_dispatcher(email_provider: AsyncMock) -> EmailDispatcher:
    return EmailDispatcher(email_provider, app_url="http://localhost:3000")


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_maker() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def user_repo(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def auth_service(
    db_session: AsyncSession,
    user_repo: UserRepository,
    token_service: TokenService,
    resend_policy: ResendPolicy,
    email_dispatcher: EmailDispatcher,
) -> AuthService:
    return AuthService(
        session=db_session,
        user_repo=user_repo,
        token_service=token_service,
        resend_policy=resend_policy,
        email_dispatcher=email_dispatcher,
    )


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    clock: FrozenClock,
    token_service: TokenService,
    resend_policy: ResendPolicy,
    email_dispatcher: EmailDispatcher,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden dependencies."""
    from reelauth.infrastructure.api.app import create_app
    from reelauth.infrastructure.api.dependencies import (
        get_clock,
        get_email_dispatcher,
        get_token_service,
    )
    from reelauth.infrastructure.persistence.database import get_db_session

    app = create_app()

    async def override_get_db_session():
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_token_service] = lambda: token_service
    app.dependency_overrides[get_email_dispatcher] = lambda: email_dispatcher

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}
