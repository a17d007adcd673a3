"""FastAPI dependencies.

Builds the auth service and its collaborators per request and extracts the
bearer access token from the Authorization header.
"""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from reelauth.core.clock import Clock, SystemClock
from reelauth.core.config import Settings, get_settings
from reelauth.domain.exceptions import InvalidTokenError
from reelauth.domain.services import AuthService, ResendPolicy
from reelauth.infrastructure.auth.token_service import TokenService
from reelauth.infrastructure.auth.token_types import AccessTokenPayload
from reelauth.infrastructure.persistence.database import get_db_session
from reelauth.infrastructure.persistence.repositories import UserRepository
from reelauth.infrastructure.services.email_dispatcher import EmailDispatcher

_system_clock = SystemClock()
_bearer_scheme = HTTPBearer(auto_error=False)


def get_clock() -> Clock:
    """Time source for token issuance and debounce checks."""
    return _system_clock


def get_token_service(
    settings: Annotated[Settings, Depends(get_settings)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> TokenService:
    return TokenService(settings.token_settings(), clock)


def get_email_dispatcher(request: Request) -> EmailDispatcher:
    return request.app.state.email_dispatcher


def get_auth_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    settings: Annotated[Settings, Depends(get_settings)],
    clock: Annotated[Clock, Depends(get_clock)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
    email_dispatcher: Annotated[EmailDispatcher, Depends(get_email_dispatcher)],
) -> AuthService:
    """Assemble the auth service for one request."""
    return AuthService(
        session=session,
        user_repo=UserRepository(session),
        token_service=token_service,
        resend_policy=ResendPolicy(
            token_service, clock, settings.resend_email_debounce_seconds
        ),
        email_dispatcher=email_dispatcher,
    )


async def get_access_token_payload(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
) -> AccessTokenPayload:
    """Validate the bearer access token.

    Raises:
        InvalidTokenError: Header missing, not a bearer token, or invalid.
        ExpiredTokenError: The access token has expired.
    """
    if credentials is None or not credentials.credentials:
        raise InvalidTokenError("Access token is required")
    return token_service.verify_access_token(credentials.credentials)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
AccessTokenDep = Annotated[AccessTokenPayload, Depends(get_access_token_payload)]
