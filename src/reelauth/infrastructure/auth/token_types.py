"""Token types and payload models.

Payloads form a tagged union keyed by ``token_type``. Use
``parse_token_payload`` to turn decoded claims into the matching model and
match on the concrete class (or ``token_type``) at every consumption site.
"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class TokenType(str, Enum):
    """Supported token kinds."""

    ACCESS = "access_token"
    REFRESH = "refresh_token"
    EMAIL_VERIFY = "email_verify_token"


class _BasePayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., description="Subject identifier")
    issued_at: int = Field(..., description="Unix timestamp when the token was issued")
    expires_at: int = Field(..., description="Unix timestamp when the token expires")
    token_id: str = Field(..., description="Unique identifier of the token (jti)")


class AccessTokenPayload(_BasePayload):
    """Claims of a short-lived access token."""

    token_type: Literal[TokenType.ACCESS] = TokenType.ACCESS
    is_verified: bool = Field(..., description="Verification state at issuance")


class RefreshTokenPayload(_BasePayload):
    """Claims of a long-lived refresh token."""

    token_type: Literal[TokenType.REFRESH] = TokenType.REFRESH
    is_verified: bool = Field(..., description="Verification state at issuance")


class EmailVerifyTokenPayload(_BasePayload):
    """Claims of an email verification token."""

    token_type: Literal[TokenType.EMAIL_VERIFY] = TokenType.EMAIL_VERIFY


TokenPayload = Annotated[
    Union[AccessTokenPayload, RefreshTokenPayload, EmailVerifyTokenPayload],
    Field(discriminator="token_type"),
]

_payload_adapter: TypeAdapter[TokenPayload] = TypeAdapter(TokenPayload)


def parse_token_payload(data: dict) -> AccessTokenPayload | RefreshTokenPayload | EmailVerifyTokenPayload:
    """Validate a claims dict into the payload model selected by ``token_type``."""
    return _payload_adapter.validate_python(data)


class AuthTokens(BaseModel):
    """Access/refresh pair returned by successful auth operations."""

    access_token: str
    refresh_token: str
