"""Runtime configuration, read from APKPURE_* environment variables or a .env file."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="APKPURE_", env_file=".env", extra="ignore")

    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3000
    log_level: str = "INFO"

    search_limit: int = Field(default=20, gt=0)
    # Caps simultaneous enrichments; each one makes up to four outbound calls.
    max_concurrent_enrichments: int = Field(default=20, gt=0)
    item_failure_policy: Literal["abort", "skip"] = "abort"

    # Seconds. None disables the timeout for that call.
    shorten_timeout: float | None = 5.0
    probe_timeout: float | None = 5.0
    page_timeout: float | None = None
    search_timeout: float | None = None


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
