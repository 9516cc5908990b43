from __future__ import annotations

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application-level settings for the FastAPI service.

    This is separate from src.db.config.Settings, which focuses on the database layer.
    """

    # FastAPI metadata
    APP_NAME: str = Field(default="Boiler API")
    APP_DESCRIPTION: str = Field(
        default=(
            "Todo boilerplate service with credentials sessions, a generic "
            "repository layer and audit stamping."
        )
    )
    APP_VERSION: str = Field(default="0.1.0")

    # CORS
    CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Comma-separated list or JSON array of allowed origins. Default: *",
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True)
    CORS_ALLOW_METHODS: List[str] = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_HEADERS: List[str] = Field(default_factory=lambda: ["*"])

    # Startup behavior
    RUN_MIGRATIONS_ON_STARTUP: bool = Field(
        default=True,
        description="If true, run Alembic migrations (upgrade head) at app startup.",
    )
    AUTO_SEED: bool = Field(
        default=False,
        description="If true, seed the admin credential and default priorities after migrations.",
    )

    # Sessions
    SESSION_COOKIE_NAME: str = Field(default="ss-id")
    SESSION_SECRET_KEY: str = Field(
        default="change-me",
        description="Key used to sign the session cookie. Override in every deployed environment.",
    )
    SESSION_ALGORITHM: str = Field(default="HS256")
    SESSION_EXPIRE_MINUTES: int = Field(default=60 * 24 * 14, ge=1)
    SESSION_COOKIE_SECURE: bool = Field(default=False)

    # Session cache; in-process memory cache when unset
    REDIS_URL: Optional[str] = Field(default=None, description="redis://host:port/db")

    # Seed credentials
    SEED_ADMIN_USERNAME: str = Field(default="admin")
    SEED_ADMIN_EMAIL: str = Field(default="admin@admin.com")
    SEED_ADMIN_PASSWORD: str = Field(default="password")

    LOG_LEVEL: str = Field(default="INFO")

    # Environment label
    ENVIRONMENT: Optional[str] = Field(
        default=None, description="Environment label (dev/test/prod)"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        """
        Accept both JSON array format and comma-separated formats for CORS origins.
        """
        if v is None:
            return ["*"]
        if isinstance(v, str):
            parts = [p.strip() for p in v.split(",") if p.strip()]
            return parts or ["*"]
        if isinstance(v, list):
            return v or ["*"]
        return ["*"]


# PUBLIC_INTERFACE
def get_app_settings() -> AppSettings:
    """
    Return a new AppSettings instance populated from environment variables.

    Note:
      Construction is cheap, so callers get a fresh instance and environment
      changes (e.g. in tests) are picked up immediately.
    """
    return AppSettings()
