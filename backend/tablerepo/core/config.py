"""
Centralized configuration management using Pydantic Settings.

This module provides type-safe configuration management with validation,
loading settings from environment variables and .env files.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """
    Database access settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Credentials belong in the DATABASE_URL of a .env file (gitignored).
    """

    # Database Configuration
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/tablerepo.db",
        description="Database connection URL (async driver, SQLite or PostgreSQL)"
    )
    database_echo: bool = Field(
        default=False,
        description="Echo compiled SQL statements through the sqlalchemy.engine logger"
    )
    database_pool_pre_ping: bool = Field(
        default=True,
        description="Test pooled connections before use (ignored for SQLite)"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )
    log_json: bool = Field(
        default=True,
        description="Emit single-line JSON logs instead of plain text"
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """
        Validate database URL format.

        Ensures URL has a supported scheme. SQLite and PostgreSQL are
        the dialects the repository is tested against.
        """
        if not v or v.strip() == "":
            raise ValueError("DATABASE_URL is required and cannot be empty")

        valid_schemes = ["sqlite", "sqlite+aiosqlite", "postgresql", "postgresql+asyncpg"]
        if not any(v.startswith(scheme + "://") for scheme in valid_schemes):
            raise ValueError(
                f"DATABASE_URL must start with one of: {', '.join(valid_schemes)}. "
                f"Got: {v[:20]}..."
            )

        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log level and reject unknown names."""
        level = v.strip().upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL must be one of: {', '.join(VALID_LOG_LEVELS)}. Got: {v}"
            )
        return level


# Global settings instance
# Import this instance throughout the application
settings = Settings()
