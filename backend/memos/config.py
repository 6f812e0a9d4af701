"""
Memos Backend — Application Configuration
==========================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; checked again during startup.
"""

from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_PASSWORD = "memos123"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for a single-user deployment on one
    machine. Attributes are grouped by concern.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # Format: sqlite+aiosqlite:///path.db or postgresql+asyncpg://user:pw@host/db
    database_url: str = Field(
        default="sqlite+aiosqlite:///./memos.db",
        description="Async SQLAlchemy connection URL",
    )

    # Pool options are ignored for SQLite URLs (see database.build_engine)
    db_pool_size: int = Field(default=5, ge=1, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    # Create missing tables on startup. Disable when Alembic owns the schema.
    db_auto_create: bool = Field(default=True)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated origins; "*" allows any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

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

    # ── Memos ─────────────────────────────────────────────────────────────
    # Shared secret checked by POST /api/auth/verify
    memos_password: str = Field(default=DEFAULT_PASSWORD)

    # IANA zone that defines calendar days for the ?date= filter
    timezone: str = Field(default="UTC")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Rejects zone names the tz database does not know."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone '{v}'")
        return v

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    # ── Rate Limiting ─────────────────────────────────────────────────────
    # Per-IP sliding window
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_requests: int = Field(default=600, ge=10, le=100000)
    rate_limit_window: int = Field(default=60, ge=1, le=86400)  # seconds

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # DATABASE_URL and database_url both work
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Checks settings that are legal but unsafe to run with.
        When:  Called during app startup (lifespan).
        How:   Raises ValueError listing every problem found.
        """
        errors = []
        if not self.memos_password:
            errors.append("MEMOS_PASSWORD is empty; nobody can pass the login gate.")
        elif self.memos_password == DEFAULT_PASSWORD:
            errors.append(
                "MEMOS_PASSWORD is still the default. Set MEMOS_PASSWORD in the environment."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
