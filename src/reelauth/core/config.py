"""Configuration management for ReelAuth.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded at application
startup and is immutable during runtime.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SECRET = "change-me-in-production-use-openssl-rand-hex-32"


@dataclass(frozen=True)
class TokenSettings:
    """Signing secrets and lifetimes for each token kind.

    Passed explicitly into the token service so that codecs with distinct
    secrets can coexist (e.g. in tests).

    Attributes:
        access_secret: Secret used to sign access tokens.
        refresh_secret: Secret used to sign refresh tokens.
        email_verify_secret: Secret used to sign email verification tokens.
        access_lifetime_seconds: Lifetime of access tokens.
        refresh_lifetime_seconds: Lifetime of refresh tokens.
        email_verify_lifetime_seconds: Lifetime of email verification tokens.
        issuer: Value of the ``iss`` claim.
    """

    access_secret: str
    refresh_secret: str
    email_verify_secret: str
    access_lifetime_seconds: int = 15 * 60
    refresh_lifetime_seconds: int = 100 * 24 * 3600
    email_verify_lifetime_seconds: int = 7 * 24 * 3600
    issuer: str = "reelauth"


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="REELAUTH_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "ReelAuth"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"
    app_url: str = Field(
        default="http://localhost:3000",
        description="Public frontend URL used to build verification links",
    )

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./data/reelauth.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # Token Settings
    jwt_secret_access_token: str = DEFAULT_SECRET
    jwt_secret_refresh_token: str = DEFAULT_SECRET + "-refresh"
    jwt_secret_email_verify_token: str = DEFAULT_SECRET + "-email-verify"
    access_token_expire_seconds: int = 15 * 60
    refresh_token_expire_seconds: int = 100 * 24 * 3600
    email_verify_token_expire_seconds: int = 7 * 24 * 3600
    token_issuer: str = "reelauth"

    # Minimum spacing between two verification emails for the same user
    resend_email_debounce_seconds: int = 60

    # Email Settings
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    smtp_use_ssl: bool = False
    smtp_timeout: int = 10
    email_from_address: str = "no-reply@reelauth.local"
    email_from_name: str = "ReelAuth"

    # CORS Settings
    cors_origins: list[str] = Field(default=["http://localhost:3000"])

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator(
        "access_token_expire_seconds",
        "refresh_token_expire_seconds",
        "email_verify_token_expire_seconds",
    )
    @classmethod
    def validate_lifetime(cls, v: int) -> int:
        """Token lifetimes must be positive."""
        if v <= 0:
            raise ValueError("Token lifetime must be a positive number of seconds")
        return v

    @field_validator("resend_email_debounce_seconds")
    @classmethod
    def validate_debounce(cls, v: int) -> int:
        """Debounce window cannot be negative."""
        if v < 0:
            raise ValueError("Resend debounce must not be negative")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    def token_settings(self) -> TokenSettings:
        """Build the explicit token configuration for the token service."""
        return TokenSettings(
            access_secret=self.jwt_secret_access_token,
            refresh_secret=self.jwt_secret_refresh_token,
            email_verify_secret=self.jwt_secret_email_verify_token,
            access_lifetime_seconds=self.access_token_expire_seconds,
            refresh_lifetime_seconds=self.refresh_token_expire_seconds,
            email_verify_lifetime_seconds=self.email_verify_token_expire_seconds,
            issuer=self.token_issuer,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    This function caches the settings instance to avoid reloading
    configuration on every call. Settings are loaded once at startup.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
