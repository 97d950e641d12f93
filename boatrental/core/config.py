"""Boat Rental Admin Configuration - environment-driven settings."""

import os
import secrets
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Required in production:
      - DATABASE_URL
      - JWT_SECRET_KEY (auto-generated per process when unset; sessions then
        do not survive a restart)
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Boat Rental Admin"
    app_version: str = "0.3.0"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./boatrental.db"
    db_pool_size: int = 10
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 1800
    auto_create_tables: bool = False

    # Session tokens
    jwt_secret_key: str = Field(
        default_factory=lambda: secrets.token_urlsafe(48),
        description="Secret key for signing session tokens. MUST be set in production.",
    )
    jwt_algorithm: str = "HS256"
    session_lifetime_hours: int = Field(default=24, ge=1, le=24 * 30)
    session_transport: Literal["cookie", "header"] = "cookie"
    session_cookie_name: str = "session"
    session_cookie_secure: bool = False
    session_revocation_enabled: bool = False
    login_url: str = "/login"

    # Comma-separated list of allowed CORS origins
    cors_origins: str = ""

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret_key(cls, value: str) -> str:
        if len(value) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown LOG_LEVEL: {value}")
        return level

    @field_validator("login_url")
    @classmethod
    def validate_login_url(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("LOGIN_URL must be an absolute path")
        return value

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def session_lifetime_seconds(self) -> int:
        return self.session_lifetime_hours * 3600

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def check_security_configuration(self) -> list[str]:
        """Return human-readable warnings about insecure settings."""
        warnings: list[str] = []
        if "jwt_secret_key" not in self.model_fields_set:
            warnings.append(
                "JWT_SECRET_KEY is not set; a random key was generated and all "
                "sessions will be invalidated on restart"
            )
        if self.session_transport == "cookie" and not self.session_cookie_secure:
            if not os.environ.get("CI"):
                warnings.append(
                    "SESSION_COOKIE_SECURE is disabled; session cookies will be sent over plain HTTP"
                )
        if self.debug:
            warnings.append("DEBUG is enabled; API docs are exposed without authentication")
        return warnings


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
