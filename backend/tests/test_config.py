from __future__ import annotations

import pytest
from pydantic import ValidationError

from conftest import build_settings
from wildway.core.config import Settings
from wildway.core.exceptions import InvalidConfigurationError


def test_short_jwt_secret_fails_fast() -> None:
    settings = build_settings(JWT_SECRET="too-short")

    with pytest.raises(InvalidConfigurationError) as exc_info:
        settings.validate_runtime_security()
    assert exc_info.value.details == {"setting": "JWT_SECRET"}


@pytest.mark.parametrize("name", ["JWT_EXPIRES_MINUTES", "JWT_COOKIE_EXPIRES_DAYS", "PASSWORD_RESET_EXPIRE_MINUTES"])
def test_non_positive_lifetimes_fail_fast(name: str) -> None:
    settings = build_settings(**{name: 0})

    with pytest.raises(InvalidConfigurationError):
        settings.validate_runtime_security()


@pytest.mark.parametrize("missing", ["JWT_SECRET", "JWT_EXPIRES_MINUTES", "SMTP_HOST", "SMTP_PASSWORD"])
def test_required_settings_have_no_defaults(monkeypatch, missing: str) -> None:  # noqa: ANN001
    monkeypatch.delenv(missing, raising=False)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)



@pytest.mark.parametrize("name", ["SMTP_HOST", "SMTP_FROM", "SMTP_USER", "SMTP_PASSWORD"])
def test_blank_mail_settings_fail_fast(name: str) -> None:
    settings = build_settings(**{name: "  "})

    with pytest.raises(InvalidConfigurationError) as exc_info:
        settings.validate_runtime_security()
    assert exc_info.value.details == {"setting": name}

def test_derived_settings() -> None:
    settings = build_settings(
        ENV="Production",
        CORS_ORIGINS="https://wildway.io, https://admin.wildway.io,",
        ALLOWED_HOSTS="",
    )

    settings.validate_runtime_security()
    assert settings.is_production
    assert settings.cors_origins == ["https://wildway.io", "https://admin.wildway.io"]
    assert settings.allowed_hosts == ["*"]
