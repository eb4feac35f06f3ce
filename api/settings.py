"""
Application settings using pydantic-settings for type-safe configuration.

All environment variables for the HTTP layer are centralized here. Settings
are loaded once at startup and cached. Per-event seating settings live on
the event itself (see ``seating.config``), not here.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for local development.
    Production values should be set via environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    skip_pb_auth: bool = Field(
        default=False,
        description="Skip PocketBase authentication on startup (for testing)",
    )

    # === PocketBase Configuration ===
    pocketbase_url: str = Field(
        default="http://127.0.0.1:8090",
        description="PocketBase server URL",
    )
    pocketbase_admin_email: str = Field(
        default="admin@example.com",
        description="PocketBase admin email for API authentication",
    )
    pocketbase_admin_password: str = Field(
        default="",
        description="PocketBase admin password (required - no default for security)",
    )

    @field_validator("pocketbase_admin_password", mode="after")
    @classmethod
    def validate_admin_password(cls, v: str) -> str:
        """Warn when the admin password is unset or an obvious default."""
        if v in {"password", "admin", "123456", ""}:
            logger.warning(
                "SECURITY WARNING: POCKETBASE_ADMIN_PASSWORD is not set or uses an insecure default. "
                "Set a strong password in your .env file for production use."
            )
        return v

    # === Snapshot Mode ===
    seating_snapshot_file: str = Field(
        default="",
        description="Serve seating from this JSON snapshot (in-memory store) instead of PocketBase",
    )

    # === CORS Configuration ===
    allowed_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        alias="ALLOWED_ORIGINS",
        description="Allowed CORS origins (comma-separated)",
    )

    @property
    def allowed_origins(self) -> list[str]:
        """Parse comma-separated origins string into list."""
        return [origin.strip() for origin in self.allowed_origins_str.split(",") if origin.strip()]

    @property
    def uses_snapshot(self) -> bool:
        return bool(self.seating_snapshot_file)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once and cached for the lifetime of the application.
    """
    return Settings()
