from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service settings read from the environment, with .env as a fallback.

    Component configs (FxConfig, RetryConfig, FeedConfig) are built from
    these through their from_settings() constructors.
    """

    # App basics
    ENV: Literal["development", "staging", "production"] = "development"
    """Environment mode: affects logging and demo data endpoints."""

    DEBUG: bool = True
    """Enable debug mode: verbose logging and development features."""

    APP_NAME: str = "Ledger FX Service"

    # DB
    DATABASE_URL: Optional[str] = None
    """Database connection URL. If None, uses SQLite for development."""

    # FX provider (exchangerate.host compatible)
    FX_BASE_URL: str = "https://api.exchangerate.host"
    """Base URL of the currency conversion provider."""

    FX_ACCESS_KEY: Optional[str] = None
    """Access key sent as the access_key query parameter. Required for conversions."""

    FX_TIMEOUT_SECONDS: float = 2.0
    """Response timeout applied to every conversion attempt."""

    FX_MAX_RETRIES: int = 2
    """Retries after the first attempt for timeouts and connection failures."""

    FX_BACKOFF_SECONDS: float = 0.2
    """First backoff delay; doubles on each retry."""

    # Ledger feed
    FEED_INTERVAL_SECONDS: float = 1.0
    """Seconds between store polls for a ledger stream subscription."""

    FEED_BATCH_SIZE: int = 20
    """Most recent entries fetched per poll."""

    FEED_DEDUP_MODE: Literal["tick", "entry"] = "tick"
    """Key compared against the previous emission: tick head or single entry."""

    # Model config
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance to avoid re-parsing .env repeatedly."""
    return Settings()
