"""
Retry policy for resilient provider calls.

Implements bounded exponential backoff with optional jitter. Each attempt's
failure is classified: retryable failures wait and try again until the
attempt budget is spent, everything else propagates immediately.
"""

import random
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

from app.core.clock import Clock, SYSTEM_CLOCK
from app.fx.config import RetryConfig

logger = structlog.get_logger()

T = TypeVar("T")


def _always(_exc: Exception) -> bool:
    return True


class RetryPolicy:
    """
    Exponential backoff retry loop.

    attempt -> classify failure -> retry after delay or fail -> loop,
    bounded by ``config.max_attempts``.
    """

    def __init__(
        self,
        config: RetryConfig,
        retry_if: Callable[[Exception], bool] = _always,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the policy.

        Args:
            config: Attempt budget and backoff shape
            retry_if: Returns True for failures worth another attempt
            clock: Time source used for backoff sleeps
            rng: Random source for jitter
        """
        self.config = config
        self.retry_if = retry_if
        self.clock = clock or SYSTEM_CLOCK
        self.rng = rng or random.Random()

    def delay_for(self, retry_number: int) -> float:
        """
        Backoff before the given retry (0 = first retry).

        Returns:
            Delay in seconds
        """
        delay = min(
            self.config.initial_delay * (self.config.exponential_base**retry_number),
            self.config.max_delay,
        )
        if self.config.jitter:
            delay = delay * (0.5 + self.rng.random() * 0.5)
        return delay

    async def run(
        self,
        func: Callable[[], Awaitable[T]],
        operation_name: str = "operation",
    ) -> T:
        """
        Execute ``func`` under the policy.

        Args:
            func: Async callable performing one attempt
            operation_name: Name for logging

        Returns:
            Result of the first successful attempt

        Raises:
            Exception: The non-retryable failure, or the last retryable one
                once the attempt budget is exhausted
        """
        for attempt in range(self.config.max_attempts):
            try:
                return await func()
            except Exception as e:
                attempt_num = attempt + 1

                if not self.retry_if(e):
                    logger.info(
                        "retry.not_retryable",
                        operation=operation_name,
                        attempt=attempt_num,
                        error_type=type(e).__name__,
                    )
                    raise

                if attempt_num >= self.config.max_attempts:
                    logger.error(
                        "retry.exhausted",
                        operation=operation_name,
                        attempts=attempt_num,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    raise

                delay = self.delay_for(attempt)
                logger.warning(
                    "retry.attempt",
                    operation=operation_name,
                    attempt=attempt_num,
                    max_attempts=self.config.max_attempts,
                    delay_seconds=delay,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                await self.clock.sleep(delay)

        raise RuntimeError("Retry loop ended without result")
