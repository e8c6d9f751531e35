"""
FX client configuration.

Defines the provider endpoint, credential, response timeout and the retry
policy applied to conversion calls.
"""

from typing import Optional

from pydantic import BaseModel, Field

from app.core.config import Settings, get_settings


class RetryConfig(BaseModel):
    """Configuration for retry behavior with exponential backoff."""

    max_retries: int = Field(
        default=2, ge=0, description="Retries after the first attempt"
    )
    initial_delay: float = Field(
        default=0.2, gt=0, description="Delay before the first retry in seconds"
    )
    max_delay: float = Field(default=5.0, gt=0, description="Maximum delay in seconds")
    exponential_base: float = Field(default=2.0, gt=1, description="Backoff multiplier")
    jitter: bool = Field(
        default=False, description="Scale each delay by a random factor in [0.5, 1.0]"
    )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


class FxConfig(BaseModel):
    """Currency conversion provider configuration."""

    base_url: str = Field(
        default="https://api.exchangerate.host", description="Provider base URL"
    )
    convert_path: str = Field(default="/convert", description="Conversion endpoint")
    access_key: Optional[str] = Field(
        default=None, description="Provider access key (access_key query parameter)"
    )
    timeout_seconds: float = Field(
        default=2.0, gt=0, description="Response timeout per attempt"
    )
    retry: RetryConfig = Field(default_factory=RetryConfig)

    @classmethod
    def from_settings(cls, settings: Settings) -> "FxConfig":
        return cls(
            base_url=settings.FX_BASE_URL,
            access_key=settings.FX_ACCESS_KEY,
            timeout_seconds=settings.FX_TIMEOUT_SECONDS,
            retry=RetryConfig(
                max_retries=settings.FX_MAX_RETRIES,
                initial_delay=settings.FX_BACKOFF_SECONDS,
            ),
        )


def get_fx_config() -> FxConfig:
    """Build the FX configuration from application settings."""
    return FxConfig.from_settings(get_settings())
