"""Fixed-window rate limiter
=========================

Non-blocking outbound quota shared by every request the pipeline issues.
A key gets ``points`` permits per window; the window starts at the key's
first consumption and resets once ``duration_seconds`` has elapsed.
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict

from loguru import logger

from basescout.exceptions import RateExceeded

__all__ = ["FixedWindowRateLimiter"]


@dataclass
class _Window:
    started_at: float
    consumed: int = 0


class FixedWindowRateLimiter:
    """In-memory permit counter keyed by caller identifier.

    Example:
        ```python
        limiter = FixedWindowRateLimiter(points=10, duration_seconds=1.0)
        remaining = limiter.consume()      # 9
        ```
    """

    def __init__(
        self,
        points: int = 10,
        duration_seconds: float = 1.0,
        key_prefix: str = "blockscout",
        clock: Callable[[], float] = time.monotonic,
    ):
        if points < 1:
            raise ValueError("points must be at least 1")
        if duration_seconds <= 0:
            raise ValueError("duration_seconds must be positive")

        self.points = points
        self.duration_seconds = duration_seconds
        self.key_prefix = key_prefix
        self._clock = clock
        self._windows: Dict[str, _Window] = {}

    def _full_key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}" if self.key_prefix else key

    def _current_window(self, full_key: str, now: float) -> _Window:
        window = self._windows.get(full_key)
        if window is None or now - window.started_at >= self.duration_seconds:
            window = _Window(started_at=now)
            self._windows[full_key] = window
        return window

    def consume(self, key: str = "global") -> int:
        """Take one permit for ``key``.

        Returns:
            int: Permits left in the current window

        Raises:
            RateExceeded: If the window's quota is already used up
        """
        full_key = self._full_key(key)
        now = self._clock()
        window = self._current_window(full_key, now)

        if window.consumed >= self.points:
            retry_after = max(0.0, window.started_at + self.duration_seconds - now)
            logger.warning(f"Rate limit reached for '{full_key}', window resets in {retry_after:.2f}s")
            raise RateExceeded(key=key, retry_after_seconds=retry_after)

        window.consumed += 1
        return self.points - window.consumed

    def remaining(self, key: str = "global") -> int:
        """Permits left for ``key`` without consuming one."""
        full_key = self._full_key(key)
        window = self._windows.get(full_key)
        if window is None or self._clock() - window.started_at >= self.duration_seconds:
            return self.points
        return max(0, self.points - window.consumed)

    def reset(self) -> None:
        self._windows.clear()
