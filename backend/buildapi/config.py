"""
Build API — Application Configuration
=======================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by the app factory, the database layer and the seeding CLI.
When:  Loaded once at module import time; validated before the app starts.

Environment variables (case-insensitive):
    DATABASE_URL      sqlite+aiosqlite:///./aggregates.db
    DB_POOL_SIZE      1
    DB_MAX_OVERFLOW   0
    HOST              0.0.0.0
    PORT              3000
    CORS_ORIGINS      *
    LOG_LEVEL         INFO
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every setting has a default that runs the service locally against a
    SQLite file in the working directory.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # What: Async SQLite connection string using the aiosqlite driver
    # Format: sqlite+aiosqlite:///<relative path> or sqlite+aiosqlite:////<absolute path>
    database_url: str = Field(
        default="sqlite+aiosqlite:///./aggregates.db",
        description="Async SQLite connection URL for the aggregates store"
    )

    # What: One long-lived connection; SQLite is a single-writer store
    # Requests queue for the connection instead of opening new ones
    db_pool_size: int = Field(default=1, ge=1, le=5)
    db_max_overflow: int = Field(default=0, ge=0, le=5)

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)

    # ── CORS ──────────────────────────────────────────────────────────────
    # What: Allowed origins for cross-origin requests
    # Format: Comma-separated URLs, or "*" for any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # What: Controls verbosity of application logging
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # PORT and port both work
        "extra": "ignore",
    }


# Singleton instance — imported throughout the application
settings = Settings()
