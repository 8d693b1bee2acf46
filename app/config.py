# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# Every tunable of the Job Tracker API (database, Redis, tokens, plan limits,
# Stripe, SMTP, OAuth) lives on one pydantic-settings class.
#
# Usage:
#   from app.config import settings
#   settings.FREE_PLAN_APPLICATION_LIMIT
#
# Real environment variables win over values from a local .env file.
#
# Optional integrations (Stripe, SMTP, OAuth providers) default to empty
# strings; the features that need them answer NOT_CONFIGURED until set.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Job Tracker configuration.

    Import the module-level `settings` rather than instantiating this.
    """

    # -------------------------------------------------------------------------
    # Database
    # -------------------------------------------------------------------------

    DATABASE_URL: str = Field(
        default="sqlite:///./jobtracker.db",
        description="SQLAlchemy database URL (postgresql+psycopg2://... in production)"
    )

    DATABASE_ECHO: bool = Field(
        default=False,
        description="Log every SQL statement"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (Celery broker, shared rate limiter)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker and rate limiting"
    )

    RATE_LIMIT_BACKEND: Literal["memory", "redis"] = Field(
        default="memory",
        description="Where rate limit counters live (memory is per process)"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production", "test"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    APP_URL: str = Field(
        default="http://localhost:3000",
        description="Public URL of the web app, used in emails and redirects"
    )

    FREE_PLAN_APPLICATION_LIMIT: int = Field(
        default=200,
        ge=1,
        description="Maximum live applications on the FREE plan"
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    SECRET_KEY: str = Field(
        default="dev-secret-key-change-in-production",
        min_length=16,
        description="Secret key for signing access tokens and OAuth state"
    )

    ACCESS_TOKEN_EXPIRE_DAYS: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Lifetime of access tokens and their sessions"
    )

    TWO_FACTOR_ENCRYPTION_KEY: str = Field(
        default="",
        description="Fernet key for 2FA secrets (derived from SECRET_KEY when empty)"
    )

    CRON_SECRET: str = Field(
        default="",
        description="Bearer secret required by the reminder endpoints"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Email (SMTP)
    # -------------------------------------------------------------------------

    SMTP_HOST: str = Field(default="", description="SMTP server host")
    SMTP_PORT: int = Field(default=587, ge=1, le=65535, description="SMTP server port")
    SMTP_USER: str = Field(default="", description="SMTP username")
    SMTP_PASSWORD: str = Field(default="", description="SMTP password")

    EMAIL_FROM: str = Field(
        default="Job Tracker <noreply@jobtracker.local>",
        description="From header for outgoing mail"
    )

    # -------------------------------------------------------------------------
    # Billing (Stripe)
    # -------------------------------------------------------------------------

    STRIPE_SECRET_KEY: str = Field(default="", description="Stripe secret API key")
    STRIPE_WEBHOOK_SECRET: str = Field(default="", description="Stripe webhook signing secret")
    STRIPE_PRICE_ID: str = Field(default="", description="Price id of the PRO subscription")

    # -------------------------------------------------------------------------
    # OAuth Providers
    # -------------------------------------------------------------------------

    GOOGLE_CLIENT_ID: str = Field(default="", description="Google OAuth client id")
    GOOGLE_CLIENT_SECRET: str = Field(default="", description="Google OAuth client secret")
    GITHUB_CLIENT_ID: str = Field(default="", description="GitHub OAuth client id")
    GITHUB_CLIENT_SECRET: str = Field(default="", description="GitHub OAuth client secret")

    OAUTH_REDIRECT_BASE: str = Field(
        default="http://localhost:3000/auth/callback",
        description="Redirect URI prefix; the provider name is appended"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Split CORS_ORIGINS on commas.

        "http://localhost:3000, https://app.example.com" -> two origins
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def smtp_configured(self) -> bool:
        return bool(self.SMTP_HOST)

    @property
    def stripe_configured(self) -> bool:
        return bool(self.STRIPE_SECRET_KEY and self.STRIPE_PRICE_ID)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """Settings are read and validated once per process."""
    return Settings()


settings = get_settings()
