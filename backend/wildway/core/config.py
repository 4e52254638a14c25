"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from wildway.core.exceptions import InvalidConfigurationError

BASE_DIR = Path(__file__).resolve().parents[2]

MIN_JWT_SECRET_LENGTH = 32


class Settings(BaseSettings):
    APP_NAME: str = "Wildway Tours API"
    ENV: str = "development"

    DATABASE_URL: str = "postgresql+psycopg://postgres@localhost:5432/wildway"

    # Session tokens and the cookie that carries them. No defaults: a missing
    # secret or lifetime must stop the process at startup.
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_MINUTES: int
    JWT_COOKIE_EXPIRES_DAYS: int
    COOKIE_NAME: str = "jwt"
    LOG_LEVEL: str = "INFO"

    PASSWORD_RESET_EXPIRE_MINUTES: int = 10
    PASSWORD_RESET_REVEAL_UNKNOWN_EMAIL: bool = True

    SMTP_HOST: str
    SMTP_PORT: int = 587
    SMTP_USER: str
    SMTP_PASSWORD: str
    SMTP_FROM: str
    SMTP_TLS: bool = True
    SMTP_TIMEOUT_SECONDS: float = 30.0

    CORS_ORIGINS: str = "http://localhost:3000"
    ALLOWED_HOSTS: str = "*"

    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_MAX_REQUESTS: int = 120
    RATE_LIMIT_AUTH_MAX_REQUESTS: int = 20

    model_config = SettingsConfigDict(env_file=str(BASE_DIR / ".env"), env_file_encoding="utf-8")

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def allowed_hosts(self) -> list[str]:
        return [host.strip() for host in self.ALLOWED_HOSTS.split(",") if host.strip()] or ["*"]

    @property
    def is_production(self) -> bool:
        return self.ENV.strip().lower() == "production"

    def validate_runtime_security(self) -> None:
        if len(self.JWT_SECRET.strip()) < MIN_JWT_SECRET_LENGTH:
            raise InvalidConfigurationError(
                f"JWT_SECRET must be at least {MIN_JWT_SECRET_LENGTH} characters",
                setting="JWT_SECRET",
            )
        for name in ("JWT_EXPIRES_MINUTES", "JWT_COOKIE_EXPIRES_DAYS", "PASSWORD_RESET_EXPIRE_MINUTES"):
            if getattr(self, name) <= 0:
                raise InvalidConfigurationError(f"{name} must be positive", setting=name)
        if self.SMTP_TIMEOUT_SECONDS <= 0:
            raise InvalidConfigurationError("SMTP_TIMEOUT_SECONDS must be positive", setting="SMTP_TIMEOUT_SECONDS")
        for name in ("SMTP_HOST", "SMTP_FROM", "SMTP_USER", "SMTP_PASSWORD"):
            if not getattr(self, name).strip():
                raise InvalidConfigurationError(f"{name} must not be empty", setting=name)


def load_settings() -> Settings:
    """Build the process-wide settings once and refuse insecure configurations."""
    settings = Settings()
    settings.validate_runtime_security()
    return settings
