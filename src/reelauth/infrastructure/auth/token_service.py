"""Token service.

Signs and verifies the three token kinds (access, refresh, email-verify).
Each kind has its own secret and lifetime, so a leaked email-verify secret
cannot forge access tokens. Time is read from an injected clock; PyJWT's
own wall-clock expiry check is disabled and replaced by ours.
"""

import uuid
from typing import Any

import jwt
from pydantic import ValidationError as PydanticValidationError

from reelauth.core.clock import Clock, to_timestamp
from reelauth.core.config import TokenSettings
from reelauth.domain.exceptions import ExpiredTokenError, InvalidTokenError
from reelauth.infrastructure.auth.token_types import (
    AccessTokenPayload,
    AuthTokens,
    EmailVerifyTokenPayload,
    RefreshTokenPayload,
    TokenType,
    parse_token_payload,
)

AnyTokenPayload = AccessTokenPayload | RefreshTokenPayload | EmailVerifyTokenPayload


class TokenService:
    """Issue and validate signed, time-bounded tokens."""

    ALGORITHM = "HS256"

    def __init__(self, settings: TokenSettings, clock: Clock) -> None:
        """Initialize the token service.

        Args:
            settings: Secrets and lifetimes per token kind.
            clock: Time source used for ``iat``/``exp`` and expiry checks.
        """
        self._settings = settings
        self._clock = clock

    def _secret(self, kind: TokenType) -> str:
        if kind is TokenType.ACCESS:
            return self._settings.access_secret
        if kind is TokenType.REFRESH:
            return self._settings.refresh_secret
        if kind is TokenType.EMAIL_VERIFY:
            return self._settings.email_verify_secret
        raise ValueError(f"Unsupported token type: {kind}")

    def lifetime(self, kind: TokenType) -> int:
        """Return the lifetime of ``kind`` in seconds."""
        if kind is TokenType.ACCESS:
            return self._settings.access_lifetime_seconds
        if kind is TokenType.REFRESH:
            return self._settings.refresh_lifetime_seconds
        if kind is TokenType.EMAIL_VERIFY:
            return self._settings.email_verify_lifetime_seconds
        raise ValueError(f"Unsupported token type: {kind}")

    def issue(self, kind: TokenType, user_id: str, *, is_verified: bool | None = None) -> str:
        """Issue a token of ``kind`` for ``user_id``.

        Args:
            kind: Token kind; selects secret and lifetime.
            user_id: Subject of the token.
            is_verified: Verification state to embed. Required for access and
                refresh tokens, rejected for email-verify tokens.

        Returns:
            Encoded JWT.
        """
        if kind in (TokenType.ACCESS, TokenType.REFRESH) and is_verified is None:
            raise ValueError(f"{kind.value} requires is_verified")
        if kind is TokenType.EMAIL_VERIFY and is_verified is not None:
            raise ValueError("email_verify_token does not carry is_verified")

        issued_at = to_timestamp(self._clock.now())
        claims: dict[str, Any] = {
            "iss": self._settings.issuer,
            "sub": user_id,
            "type": kind.value,
            "iat": issued_at,
            "exp": issued_at + self.lifetime(kind),
            "jti": uuid.uuid4().hex,
        }
        if is_verified is not None:
            claims["is_verified"] = is_verified

        return jwt.encode(claims, self._secret(kind), algorithm=self.ALGORITHM)

    def issue_pair(self, user_id: str, is_verified: bool) -> AuthTokens:
        """Issue an access and a refresh token sharing the same claims."""
        return AuthTokens(
            access_token=self.issue(TokenType.ACCESS, user_id, is_verified=is_verified),
            refresh_token=self.issue(TokenType.REFRESH, user_id, is_verified=is_verified),
        )

    def decode_ignoring_expiry(self, kind: TokenType, token: str) -> AnyTokenPayload:
        """Check signature and kind of ``token`` but not its expiry.

        Raises:
            InvalidTokenError: Bad signature, malformed token or wrong kind.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret(kind),
                algorithms=[self.ALGORITHM],
                issuer=self._settings.issuer,
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": ["iss", "sub", "iat", "exp", "jti"],
                },
            )
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError("Invalid token") from e

        if claims.get("type") != kind.value:
            raise InvalidTokenError("Invalid token type")

        try:
            return parse_token_payload(
                {
                    "token_type": kind,
                    "user_id": claims["sub"],
                    "issued_at": claims["iat"],
                    "expires_at": claims["exp"],
                    "token_id": claims["jti"],
                    **({"is_verified": claims["is_verified"]} if "is_verified" in claims else {}),
                }
            )
        except PydanticValidationError as e:
            raise InvalidTokenError("Invalid token payload") from e

    def verify(self, kind: TokenType, token: str) -> AnyTokenPayload:
        """Validate ``token`` as a token of ``kind`` and return its claims.

        Raises:
            InvalidTokenError: Bad signature, malformed token or wrong kind.
            ExpiredTokenError: Valid signature but the token has expired.
        """
        payload = self.decode_ignoring_expiry(kind, token)
        if self._clock.now().timestamp() > payload.expires_at:
            raise ExpiredTokenError()
        return payload

    def verify_access_token(self, token: str) -> AccessTokenPayload:
        """Validate an access token."""
        payload = self.verify(TokenType.ACCESS, token)
        if not isinstance(payload, AccessTokenPayload):
            raise InvalidTokenError("Invalid token type")
        return payload

    def verify_refresh_token(self, token: str) -> RefreshTokenPayload:
        """Validate a refresh token."""
        payload = self.verify(TokenType.REFRESH, token)
        if not isinstance(payload, RefreshTokenPayload):
            raise InvalidTokenError("Invalid token type")
        return payload

    def verify_email_verify_token(self, token: str) -> EmailVerifyTokenPayload:
        """Validate an email verification token."""
        payload = self.verify(TokenType.EMAIL_VERIFY, token)
        if not isinstance(payload, EmailVerifyTokenPayload):
            raise InvalidTokenError("Invalid token type")
        return payload
