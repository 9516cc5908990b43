from __future__ import annotations

import re
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Database configuration.

    Reads from environment variables (or .env via pydantic-settings):
      - DATABASE_URL (any SQLAlchemy URL; wins when set)
      - POSTGRES_URL
      - POSTGRES_USER / POSTGRES_PASSWORD / POSTGRES_DB / POSTGRES_HOST / POSTGRES_PORT
      - CREDENTIALS_DATABASE_URL (optional separate credentials store)
    """

    DATABASE_URL: Optional[str] = Field(
        default=None, description="Full SQLAlchemy URL, e.g. sqlite:///./boiler.db"
    )
    POSTGRES_URL: Optional[str] = Field(
        default=None, description="If provided, full PostgreSQL connection URL."
    )
    POSTGRES_USER: Optional[str] = Field(default=None, description="DB username")
    POSTGRES_PASSWORD: Optional[str] = Field(default=None, description="DB password")
    POSTGRES_DB: Optional[str] = Field(default=None, description="Database name")
    POSTGRES_PORT: Optional[int] = Field(
        default=5432, description="Database port (default 5432)"
    )
    POSTGRES_HOST: Optional[str] = Field(
        default="localhost", description="Database host (default localhost)"
    )

    CREDENTIALS_DATABASE_URL: Optional[str] = Field(
        default=None,
        description="Separate database for user_auth credentials; the main database when unset.",
    )

    # SQLAlchemy engine options
    SQL_ECHO: bool = Field(
        default=False, description="Echo SQL statements for debugging (default False)"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @property
    def database_url(self) -> str:
        """
        Prefer DATABASE_URL, then POSTGRES_URL, otherwise construct from the
        individual POSTGRES_* variables.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.POSTGRES_URL:
            return self.POSTGRES_URL

        if not all([self.POSTGRES_USER, self.POSTGRES_PASSWORD, self.POSTGRES_DB]):
            raise ValueError(
                "Database configuration missing. Ensure DATABASE_URL, POSTGRES_URL or "
                "POSTGRES_USER, POSTGRES_PASSWORD, and POSTGRES_DB are set in the environment."
            )
        host = self.POSTGRES_HOST or "localhost"
        port = self.POSTGRES_PORT or 5432
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{host}:{port}/{self.POSTGRES_DB}"

    @property
    def sync_database_url(self) -> str:
        """
        Database URL for the blocking engine. Async driver markers are stripped
        so postgres URLs fall back to psycopg2.
        """
        return _strip_async_driver(self.database_url)

    @property
    def credentials_database_url(self) -> Optional[str]:
        """Blocking-engine URL of the credentials database, or None to share the main one."""
        if not self.CREDENTIALS_DATABASE_URL:
            return None
        return _strip_async_driver(self.CREDENTIALS_DATABASE_URL)


def _strip_async_driver(url: str) -> str:
    return re.sub(r"^postgresql\+(asyncpg|psycopg_async)://", "postgresql://", url)


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return a settings object for reuse across modules."""
    return Settings()
