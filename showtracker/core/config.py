# showtracker/core/config.py
from __future__ import annotations

"""
# ShowTracker — Centralized Configuration (Pydantic v2)

Single `settings` object with strongly-typed, environment-driven config.

## Goals
- Safe defaults for local/dev; explicit where prod needs secrets.
- One place that knows how to build the async database DSN.
- Connection-level statement timeout is the only way to bound a propagation
  run; the engine itself never cancels mid-transaction.

## Usage
    from showtracker.core.config import settings
"""

import logging
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)
load_dotenv()  # harmless in prod; convenient in dev


# ─────────────────────────────────────────────────────────────
# Small helpers
# ─────────────────────────────────────────────────────────────
def _derive_async_url(sync_url: str) -> str:
    """Convert a sync Postgres URL to an asyncpg URL if needed."""
    if "+asyncpg" in sync_url or "+aiosqlite" in sync_url:
        return sync_url
    if sync_url.startswith("postgresql://"):
        return sync_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return sync_url


# ─────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────
class Settings(BaseSettings):
    """
    Global application settings sourced from environment.

    Database:
        - PostgreSQL (asyncpg) by default.
        - `DATABASE_URL_OVERRIDE` accepts any SQLAlchemy URL; async drivers are
          used as-is, `postgresql://` URLs are upgraded to asyncpg.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # don't crash on unknown keys
    )

    # ── App meta ──────────────────────────────────────────────
    PROJECT_NAME: str = "ShowTracker"
    VERSION: str = "1.0.0"
    ENV: Literal["development", "staging", "production"] = "development"

    # ── Database (PostgreSQL) ─────────────────────────────────
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: SecretStr = SecretStr("postgres")
    POSTGRES_DB: str = "showtracker"
    DATABASE_URL_OVERRIDE: Optional[str] = None

    # ── Pool knobs ────────────────────────────────────────────
    DB_POOL_SIZE: int = Field(10, ge=1, le=200)
    DB_MAX_OVERFLOW: int = Field(20, ge=0, le=200)
    DB_POOL_TIMEOUT: int = Field(30, ge=1, le=600)
    DB_POOL_RECYCLE: int = 1800
    DB_ECHO: bool = False

    # Applied per connection (Postgres only). 0 disables.
    DB_STATEMENT_TIMEOUT_MS: int = Field(0, ge=0)

    # ── Validators / normalizers ──────────────────────────────
    @field_validator("DATABASE_URL_OVERRIDE", mode="before")
    @classmethod
    def _blank_override_is_none(cls, v: str | None) -> str | None:
        s = (v or "").strip()
        return s or None

    # ── Derived / convenience properties ─────────────────────
    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"

    @property
    def DATABASE_URL(self) -> str:
        """Sync DSN."""
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD.get_secret_value()}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def ASYNC_DATABASE_URL(self) -> str:
        """Async SQLAlchemy DSN (override wins when set)."""
        return _derive_async_url(self.DATABASE_URL_OVERRIDE or self.DATABASE_URL)

    @property
    def is_postgres(self) -> bool:
        return self.ASYNC_DATABASE_URL.startswith("postgresql")


# Singleton instance
settings = Settings()
