"""
Ledger feed configuration.

Defines the polling cadence, snapshot size and deduplication key used by
the ledger stream.
"""

from enum import Enum

from pydantic import BaseModel, Field

from app.core.config import Settings, get_settings


class DedupMode(str, Enum):
    """What a forwarded snapshot is compared against."""

    TICK = "tick"  # head entry of the previous forwarded tick
    ENTRY = "entry"  # the single entry emitted just before


class FeedConfig(BaseModel):
    """Ledger feed polling configuration."""

    interval_seconds: float = Field(
        default=1.0, gt=0, description="Seconds between store polls"
    )
    batch_size: int = Field(
        default=20, ge=1, le=500, description="Most recent entries fetched per poll"
    )
    dedup_mode: DedupMode = Field(
        default=DedupMode.TICK, description="Deduplication key"
    )

    @classmethod
    def from_settings(cls, settings: Settings) -> "FeedConfig":
        return cls(
            interval_seconds=settings.FEED_INTERVAL_SECONDS,
            batch_size=settings.FEED_BATCH_SIZE,
            dedup_mode=DedupMode(settings.FEED_DEDUP_MODE),
        )


def get_feed_config() -> FeedConfig:
    """Build the feed configuration from application settings."""
    return FeedConfig.from_settings(get_settings())
