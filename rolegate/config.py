"""
ROLEGATE Settings

Environment-based settings for the database and the CLI.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from ROLEGATE_* environment variables or `.env`."""

    model_config = SettingsConfigDict(
        env_prefix="ROLEGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite:///rolegate.db"
    DATABASE_ECHO: bool = False

    # Engine
    STRATEGY: str = "deny_wins"
    CONFIG_FILE: Optional[str] = None

    # Logging
    LOG_LEVEL: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
