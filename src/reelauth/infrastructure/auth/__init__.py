"""Authentication infrastructure components.

This module provides password hashing and the token service used by the
authentication core.
"""

from reelauth.infrastructure.auth.password_hasher import (
    DUMMY_PASSWORD_HASH,
    hash_password,
    needs_rehash,
    verify_password,
)
from reelauth.infrastructure.auth.token_service import TokenService
from reelauth.infrastructure.auth.token_types import (
    AccessTokenPayload,
    AuthTokens,
    EmailVerifyTokenPayload,
    RefreshTokenPayload,
    TokenType,
)

__all__ = [
    "AccessTokenPayload",
    "AuthTokens",
    "DUMMY_PASSWORD_HASH",
    "EmailVerifyTokenPayload",
    "RefreshTokenPayload",
    "TokenService",
    "TokenType",
    "hash_password",
    "needs_rehash",
    "verify_password",
]
