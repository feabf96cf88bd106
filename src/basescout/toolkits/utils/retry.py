"""Retry with exponential backoff
==============================

A pure helper that re-invokes an async callable while a classifier says the
failure is worth retrying. Sleep is injectable so tests never wait.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from loguru import logger

__all__ = ["RetryPolicy", "attempt"]

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry schedule.

    ``attempts`` counts the first call, so ``attempts=1`` never retries.
    """
    attempts: int = 3
    min_delay_seconds: float = 0.25
    max_delay_seconds: float = 1.5
    factor: float = 2.0

    def __post_init__(self):
        if self.attempts < 1:
            raise ValueError("attempts must be at least 1")
        if self.min_delay_seconds < 0 or self.max_delay_seconds < 0:
            raise ValueError("retry delays must be non-negative")

    def delay_for(self, retry_number: int) -> float:
        """Delay before retry ``retry_number`` (1-based)."""
        delay = self.min_delay_seconds * (self.factor ** (retry_number - 1))
        return min(self.max_delay_seconds, delay)


async def attempt(
    fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    is_retryable: Callable[[Exception], bool] = lambda exc: True,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    description: str = "operation",
) -> T:
    """Run ``fn`` until it succeeds, the error is not retryable, or attempts run out.

    The last error is re-raised unchanged.
    """
    for attempt_number in range(1, policy.attempts + 1):
        try:
            return await fn()
        except Exception as e:
            if not is_retryable(e) or attempt_number >= policy.attempts:
                raise
            delay = policy.delay_for(attempt_number)
            logger.debug(
                f"{description} failed (attempt {attempt_number}/{policy.attempts}): {e}. "
                f"Retrying in {delay:.2f}s"
            )
            await sleep(delay)

    # attempts >= 1 guarantees the loop returns or raises
    raise RuntimeError("unreachable")
