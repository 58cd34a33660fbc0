import json
import os
import sys
from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _should_load_env_file() -> str | None:
    """Determine if .env should be loaded.

    For local development, load `.env` automatically so email credentials
    and reCAPTCHA secrets can live in `backend/.env`.

    Do NOT auto-load `.env` when running under pytest or in CI so that
    tests see only the environment they set up themselves.
    """
    if any("pytest" in str(x) for x in sys.argv if x):
        return None
    if os.environ.get("CI") in ("1", "true", "True"):
        return None
    return ".env"


class Settings(BaseSettings):
    # Environment configuration
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: 'development', 'test', 'staging', or 'production'",
    )
    APP_NAME: str = Field(
        default="Portfolio",
        description="Display name used in email subjects and the API title",
    )
    APP_VERSION: str = Field(
        default="unknown",
        description="Deployed version reported by the health endpoint",
    )
    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins (comma-separated in env var)",
    )

    # Performance settings
    SLOW_REQUEST_THRESHOLD: float = Field(
        default=1.0,
        description="Log warning for requests slower than this (seconds)",
    )

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Minimum log level: DEBUG, INFO, WARNING, ERROR",
    )
    LOG_FORMAT: str = Field(
        default="pretty",
        description="Log output format: 'pretty' (console) or 'json'",
    )
    LOG_FILE: str = Field(
        default="",
        description="Optional log file path (rotated at 10 MB, kept 7 days)",
    )

    # Contact form rate limiting (fixed window)
    RATE_LIMIT_WINDOW_MS: int = Field(
        default=900_000,
        description="Length of the contact rate-limit window in milliseconds",
    )
    RATE_LIMIT_MAX_REQUESTS: int = Field(
        default=5,
        description="Contact submissions allowed per client per window",
    )
    PUBLIC_RATE_LIMIT: str = Field(
        default="120/minute",
        description="Per-IP limit for public GET routes (slowapi syntax)",
    )

    # Spam protection
    SPAM_MIN_SUBMIT_MS: int = Field(
        default=3000,
        description="Submissions faster than this after page load are treated as bots",
    )
    RECAPTCHA_SECRET_KEY: str = Field(
        default="",
        description="reCAPTCHA secret; token verification is skipped when empty",
    )
    RECAPTCHA_MIN_SCORE: float = Field(
        default=0.5,
        description="Minimum reCAPTCHA v3 score accepted as human",
    )
    RECAPTCHA_VERIFY_URL: str = Field(
        default="https://www.google.com/recaptcha/api/siteverify",
        description="reCAPTCHA verification endpoint",
    )

    # Email Provider Settings
    EMAIL_PROVIDER: str = Field(
        default="console",
        description="Email provider: 'resend', 'smtp', 'console'",
    )
    CONTACT_EMAIL: str = Field(
        default="",
        description="Inbox that receives contact form notifications",
    )
    RESEND_API_KEY: str = Field(
        default="",
        description="Resend API key (if using the Resend provider)",
    )
    RESEND_FROM_EMAIL: str = Field(
        default="Portfolio <onboarding@resend.dev>",
        description="From address for Resend deliveries",
    )
    RESEND_API_URL: str = Field(
        default="https://api.resend.com/emails",
        description="Resend send-email endpoint",
    )
    EMAIL_MAX_ATTEMPTS: int = Field(
        default=3,
        description="Delivery attempts for the admin notification",
    )
    EMAIL_RETRY_BASE_DELAY: float = Field(
        default=1.0,
        description="Seconds before the first retry (doubles each retry)",
    )
    SMTP_HOST: str = Field(
        default="",
        description="SMTP server hostname",
    )
    SMTP_PORT: int = Field(
        default=587,
        description="SMTP server port",
    )
    SMTP_USER: str = Field(
        default="",
        description="SMTP username",
    )
    SMTP_PASSWORD: str = Field(
        default="",
        description="SMTP password",
    )
    SMTP_FROM_EMAIL: str = Field(
        default="noreply@localhost",
        description="From email address",
    )
    SMTP_FROM_NAME: str = Field(
        default="Portfolio",
        description="From display name",
    )
    SMTP_USE_TLS: bool = Field(
        default=True,
        description="Use STARTTLS for SMTP connection (port 587)",
    )
    SMTP_USE_SSL: bool = Field(
        default=False,
        description="Use implicit SSL for SMTP connection (port 465)",
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | List[str]) -> List[str]:
        """Parse CORS origins from a comma-separated string or a JSON list."""
        if isinstance(v, str) and v.strip().startswith("["):
            return json.loads(v)
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator(
        "RATE_LIMIT_WINDOW_MS", "RATE_LIMIT_MAX_REQUESTS", "EMAIL_MAX_ATTEMPTS"
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Window, quota and attempt counts must be positive."""
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Only 'pretty' and 'json' are understood by configure_logging()."""
        v = v.lower()
        if v not in ("pretty", "json"):
            raise ValueError("LOG_FORMAT must be 'pretty' or 'json'")
        return v

    model_config = SettingsConfigDict(
        env_file=_should_load_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",  # Allow extra env vars (e.g., SENTRY_DSN) without validation errors
    )


settings = Settings()


def get_settings() -> Settings:
    """Get the settings instance (for dependency injection)."""
    return settings
