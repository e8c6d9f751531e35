"""
FX use-case facade.

Routers go through this service instead of holding the HTTP client, so the
client's lifecycle is managed in one place.
"""

from decimal import Decimal
from typing import Optional

from app.fx.client import FxClient
from app.fx.models import RateQuote


class FxService:
    """Currency conversion use cases."""

    def __init__(self, client: Optional[FxClient] = None):
        self._client = client

    @property
    def client(self) -> FxClient:
        if self._client is None:
            self._client = FxClient()
        return self._client

    async def convert(
        self, from_currency: str, to_currency: str, amount: Decimal
    ) -> RateQuote:
        return await self.client.convert(from_currency, to_currency, amount)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


_service_instance: Optional[FxService] = None


def get_fx_service() -> FxService:
    """Get or create the global FX service."""
    global _service_instance
    if _service_instance is None:
        _service_instance = FxService()
    return _service_instance


async def shutdown_fx_service() -> None:
    """Release the shared HTTP connection pool."""
    global _service_instance
    if _service_instance is not None:
        await _service_instance.aclose()
        _service_instance = None
