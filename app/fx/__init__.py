"""
Foreign-exchange conversion module.

Proxies a remote conversion provider with timeout, retry and a derived-rate
fallback when the provider omits the unit rate.
"""

from app.fx.client import (
    ConfigurationError,
    FxClient,
    FxClientError,
    FxTimeoutError,
    RemoteError,
    TransportError,
)
from app.fx.models import RateQuote
from app.fx.rates import derive_rate
from app.fx.service import FxService

__all__ = [
    "ConfigurationError",
    "FxClient",
    "FxClientError",
    "FxService",
    "FxTimeoutError",
    "RateQuote",
    "RemoteError",
    "TransportError",
    "derive_rate",
]
