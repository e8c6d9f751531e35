"""
Currency conversion client for exchangerate.host compatible providers.

Builds the /convert call, applies a per-attempt response timeout and the
retry policy, classifies failures, and maps the JSON payload into a
RateQuote, deriving the unit rate when the provider leaves it out.
"""

from __future__ import annotations

import asyncio
import json
import random
from datetime import datetime, time, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from app.core.clock import Clock, SYSTEM_CLOCK
from app.core.errors import AppError
from app.fx.config import FxConfig, get_fx_config
from app.fx.models import ConvertResponse, ProviderError, RateQuote
from app.fx.rates import derive_rate
from app.fx.retry import RetryPolicy

logger = structlog.get_logger()


class FxClientError(AppError):
    """Base exception for FX client errors."""

    retryable = False

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message, status_code=status_code)


class ConfigurationError(FxClientError):
    """Raised when the provider credential is missing. No request is made."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=500)


class RemoteError(FxClientError):
    """Raised when the provider answers with an error status or success=false."""

    def __init__(
        self,
        message: str,
        upstream_status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, status_code=502)
        self.upstream_status = upstream_status
        self.details = details or {}


class FxTimeoutError(FxClientError):
    """Raised when the provider does not answer within the response timeout."""

    retryable = True

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=504)


class TransportError(FxClientError):
    """Raised on connection-level failures (DNS, refused, reset)."""

    retryable = True


def is_retryable(exc: Exception) -> bool:
    """Only timeouts and connection failures are worth another attempt."""
    return isinstance(exc, FxClientError) and exc.retryable


class FxClient:
    """
    Thin async client around the provider's /convert endpoint.

    Each ``convert`` call owns its retry state; the client only shares the
    underlying connection pool.
    """

    def __init__(
        self,
        config: Optional[FxConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Provider configuration (defaults to loaded settings)
            transport: httpx transport override (tests pass httpx.MockTransport)
            clock: Time source for backoff sleeps and receipt timestamps
            rng: Random source for backoff jitter
        """
        self.config = config or get_fx_config()
        self.clock = clock or SYSTEM_CLOCK
        self.retry_policy = RetryPolicy(
            self.config.retry, retry_if=is_retryable, clock=self.clock, rng=rng
        )
        self._http = httpx.AsyncClient(
            base_url=self.config.base_url,
            headers={"Accept": "application/json"},
            timeout=httpx.Timeout(self.config.timeout_seconds),
            transport=transport,
        )

    async def __aenter__(self) -> "FxClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def convert(
        self, from_currency: str, to_currency: str, amount: Decimal
    ) -> RateQuote:
        """
        Convert an amount between two currencies.

        Args:
            from_currency: ISO currency code (e.g. "USD")
            to_currency: ISO currency code (e.g. "PHP")
            amount: Amount to convert

        Returns:
            Quote with rate and converted amount; ``rate`` is None only when
            the provider omitted it and it could not be derived

        Raises:
            ConfigurationError: Access key missing (no request made)
            RemoteError: Provider error status or success=false
            FxTimeoutError: Every attempt timed out
            TransportError: Every attempt failed to connect
        """
        params = {
            "from": from_currency,
            "to": to_currency,
            "amount": str(amount),
            "access_key": self._require_access_key(),
        }

        logger.info(
            "fx.convert.started",
            from_currency=from_currency,
            to_currency=to_currency,
            amount=str(amount),
        )

        async def attempt() -> ConvertResponse:
            return await self._fetch(params)

        payload = await self.retry_policy.run(attempt, operation_name="fx.convert")
        quote = self._to_quote(payload, from_currency, to_currency, amount)

        logger.info(
            "fx.convert.completed",
            from_currency=quote.from_currency,
            to_currency=quote.to_currency,
            rate=str(quote.rate) if quote.rate is not None else None,
            converted=str(quote.converted) if quote.converted is not None else None,
        )
        return quote

    def _require_access_key(self) -> str:
        key = self.config.access_key
        if key is None or not key.strip():
            logger.error("fx.access_key_missing")
            raise ConfigurationError(
                "FX access key missing. Set FX_ACCESS_KEY in the environment or .env."
            )
        return key

    async def _fetch(self, params: Dict[str, str]) -> ConvertResponse:
        """One attempt: request, classify, decode."""
        try:
            response = await asyncio.wait_for(
                self._http.get(self.config.convert_path, params=params),
                timeout=self.config.timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise FxTimeoutError(
                f"FX provider did not respond within {self.config.timeout_seconds}s"
            ) from e
        except httpx.TransportError as e:
            raise TransportError(f"FX provider unreachable: {e}") from e

        if response.is_error:
            details = self._error_details(response)
            raise RemoteError(
                f"Remote error: {details}",
                upstream_status=response.status_code,
                details=details,
            )

        try:
            data = json.loads(response.content, parse_float=Decimal)
            payload = ConvertResponse.model_validate(data)
        except (ValueError, PydanticValidationError) as e:
            raise RemoteError(
                f"Malformed FX provider payload: {e}",
                upstream_status=response.status_code,
            ) from e

        if not payload.success:
            details = self._describe_error(payload.error)
            raise RemoteError(
                f"Conversion failed: {details}",
                upstream_status=response.status_code,
                details=details,
            )

        return payload

    @staticmethod
    def _describe_error(error: Any) -> Dict[str, Any]:
        if isinstance(error, ProviderError):
            return error.model_dump(exclude_none=True)
        if error:
            return {"info": str(error)}
        return {"info": "Provider reported failure without details"}

    @staticmethod
    def _error_details(response: httpx.Response) -> Dict[str, Any]:
        """Error body of a failed response, or a synthetic one if absent."""
        fallback = {
            "code": f"HTTP_{response.status_code}",
            "type": "http_error",
            "info": "No body",
        }
        if not response.content:
            return fallback
        try:
            body = response.json()
        except ValueError:
            return {**fallback, "info": response.text[:500]}

        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict):
                return error
            if error:
                return {**fallback, "info": str(error)}
            return body
        return {**fallback, "info": str(body)}

    def _to_quote(
        self,
        payload: ConvertResponse,
        from_currency: str,
        to_currency: str,
        amount: Decimal,
    ) -> RateQuote:
        query = payload.query
        source = (query.from_ if query else None) or from_currency
        target = (query.to if query else None) or to_currency
        requested = (
            query.amount if query is not None and query.amount is not None else amount
        )
        declared = payload.declared_rate()
        converted = payload.result

        rate = derive_rate(requested, converted, declared)
        if declared is None:
            if rate is not None:
                logger.warning(
                    "fx.rate.derived",
                    from_currency=source,
                    to_currency=target,
                    rate=str(rate),
                )
            else:
                logger.warning(
                    "fx.rate.unavailable",
                    from_currency=source,
                    to_currency=target,
                    converted=str(converted) if converted is not None else None,
                    amount=str(requested),
                )

        if payload.quote_date is not None:
            fetched_at = datetime.combine(payload.quote_date, time.min, tzinfo=timezone.utc)
        else:
            fetched_at = self.clock.now()

        return RateQuote(
            from_currency=source,
            to_currency=target,
            requested_amount=requested,
            rate=rate,
            converted=converted,
            fetched_at=fetched_at,
        )
