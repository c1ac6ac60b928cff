"""
Settings for basecore.

Environment-driven configuration shared by every tenant_scope component.
Values are read lazily so importing this module has no side effects.
"""

import functools

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide settings loaded from environment variables or `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Infrastructure
    REDIS_URL: str = Field(default="redis://localhost:6379/0")
    DATABASE_URL: str = Field(default="sqlite:///./tenant_scope.db")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_JSON: bool = Field(default=False, description="Emit JSON lines instead of plain text")

    # Remote site store
    SITE_STORE_PROVIDER: str = Field(default="http", description="http or stub")
    SITE_STORE_URL: str = Field(default="http://localhost:8000/api")
    SITE_STORE_API_KEY: str | None = Field(default=None)
    SITE_STORE_TIMEOUT: float = Field(default=30.0)

    # Local cache / session persistence
    SITE_CACHE_BACKEND: str = Field(default="redis", description="redis or memory")
    SESSION_BACKEND: str = Field(default="redis", description="redis, sql or memory")
    SITE_CACHE_PREFIX: str = Field(default="tenant_scope:sites:")
    SITE_CACHE_TTL: int = Field(default=0, description="Seconds; 0 keeps entries until replaced")
    SESSION_PREFIX: str = Field(default="tenant_scope:session:")


@functools.lru_cache()
def get_settings() -> Settings:
    """Get settings (cached)."""
    return Settings()
