"""
Application configuration using environment variables.
"""
import os
import secrets
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings

_GENERATED_SECRET = secrets.token_urlsafe(32)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Ignyt API"
    debug: bool = False
    environment: str = "development"
    public_base_url: str = "http://localhost:5000"

    # Security
    secret_key: str = os.getenv("SECRET_KEY", _GENERATED_SECRET)

    # Sessions
    session_cookie_name: str = "ignyt.sid"
    session_max_age_days: int = 7
    session_backend: str = "database"  # database or memory
    session_sweep_interval_seconds: int = 3600

    # Demo account (never honoured in production)
    demo_login_enabled: bool = False
    demo_username: str = "demo"
    demo_password: str = "password"

    # Database; unset means in-memory SQLite outside production
    database_url: Optional[str] = os.getenv("DATABASE_URL")

    # CORS
    cors_origins: List[str] = [
        "http://localhost:5000",
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # Rate limiting
    login_rate_limit: str = "5/minute"
    register_rate_limit: str = "3/minute"

    # Invites
    invite_expiry_days: int = 7

    # Facebook / Instagram Graph API
    facebook_app_id: Optional[str] = None
    facebook_app_secret: Optional[str] = None
    graph_api_version: str = "v19.0"
    graph_api_timeout: float = 30.0

    # Outbound mail; unset key means invitations are only logged
    sendgrid_api_key: Optional[str] = None
    mail_from: str = "no-reply@ignyt.app"
    mail_from_name: str = "Ignyt Platform"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def session_max_age_seconds(self) -> int:
        return self.session_max_age_days * 24 * 60 * 60

    @property
    def demo_login_allowed(self) -> bool:
        return self.demo_login_enabled and not self.is_production


def validate_settings(settings: Settings) -> None:
    """Refuse configurations that are only acceptable during development."""
    if not settings.is_production:
        return
    if settings.secret_key == _GENERATED_SECRET:
        raise ValueError(
            "SECRET_KEY must be set in production! "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
        )
    if not settings.database_url:
        raise ValueError("DATABASE_URL must be set in production")
    if settings.demo_login_enabled:
        raise ValueError("DEMO_LOGIN_ENABLED cannot be used in production")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Validate on startup
validate_settings(get_settings())
