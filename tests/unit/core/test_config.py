"""Unit tests for configuration loading."""

import pytest
from pydantic import ValidationError

from reelauth.core.config import Settings


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.api_prefix == "/api/v1"
    assert settings.resend_email_debounce_seconds == 60
    assert settings.smtp_host is None
    assert settings.is_development is True


def test_token_settings_defaults():
    tokens = Settings(_env_file=None).token_settings()

    assert tokens.access_lifetime_seconds == 15 * 60
    assert tokens.refresh_lifetime_seconds == 100 * 24 * 3600
    assert tokens.email_verify_lifetime_seconds == 7 * 24 * 3600
    assert len({tokens.access_secret, tokens.refresh_secret, tokens.email_verify_secret}) == 3


def test_environment_variables(monkeypatch):
    monkeypatch.setenv("REELAUTH_RESEND_EMAIL_DEBOUNCE_SECONDS", "5")
    monkeypatch.setenv("REELAUTH_JWT_SECRET_ACCESS_TOKEN", "from-env")
    monkeypatch.setenv("REELAUTH_ENVIRONMENT", "production")

    settings = Settings(_env_file=None)

    assert settings.resend_email_debounce_seconds == 5
    assert settings.token_settings().access_secret == "from-env"
    assert settings.is_production is True


def test_cors_origins_from_comma_separated_string():
    settings = Settings(cors_origins="http://a.test, http://b.test", _env_file=None)

    assert settings.cors_origins == ["http://a.test", "http://b.test"]


@pytest.mark.parametrize(
    "field",
    [
        "access_token_expire_seconds",
        "refresh_token_expire_seconds",
        "email_verify_token_expire_seconds",
    ],
)
def test_token_lifetime_must_be_positive(field):
    with pytest.raises(ValidationError):
        Settings(**{field: 0}, _env_file=None)


def test_debounce_must_not_be_negative():
    with pytest.raises(ValidationError):
        Settings(resend_email_debounce_seconds=-1, _env_file=None)

    assert Settings(resend_email_debounce_seconds=0, _env_file=None).resend_email_debounce_seconds == 0
