"""Outbound rate governor.

Sliding window per key: at most `max_requests` slots are handed out in any
`time_window` seconds. Slot acquisition never fails, it only waits.
"""

import asyncio
import time
from collections import deque
from typing import Awaitable, Callable, Deque, Dict

from productboard_mcp.core.logging import logger

GLOBAL_KEY = "global"


class RateLimiter:
    """Sliding window rate limiter shared by every outbound call."""

    def __init__(
        self,
        max_requests: int = 60,
        time_window: float = 60.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initializes the rate limiter.

        Args:
            max_requests: Maximum number of requests allowed in the time window.
            time_window: The time window in seconds.
            clock: Monotonic clock, injectable for tests.
            sleep: Async sleep, injectable for tests.
        """
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if time_window <= 0:
            raise ValueError("time_window must be positive")

        self.max_requests = max_requests
        self.time_window = time_window
        self._clock = clock
        self._sleep = sleep
        self._timestamps: Dict[str, Deque[float]] = {}
        self._lock = asyncio.Lock()
        logger.info(
            "RateLimiter initialized: {} requests / {} seconds", max_requests, time_window
        )

    def _window(self, key: str) -> Deque[float]:
        window = self._timestamps.get(key)
        if window is None:
            window = deque()
            self._timestamps[key] = window
        return window

    def _cleanup(self, window: Deque[float], now: float) -> None:
        while window and now - window[0] >= self.time_window:
            window.popleft()

    async def acquire_slot(self, key: str = GLOBAL_KEY) -> None:
        """Waits until `key` has budget for one more call, then records it."""
        while True:
            async with self._lock:
                now = self._clock()
                window = self._window(key)
                self._cleanup(window, now)
                if len(window) < self.max_requests:
                    window.append(now)
                    return
                wait_time = max(0.0, window[0] + self.time_window - now)

            logger.debug("Rate limit reached for '{}'. Waiting {:.2f}s", key, wait_time)
            # zero-length waits still yield so other holders can progress
            await self._sleep(wait_time)

    async def get_wait_time(self, key: str = GLOBAL_KEY) -> float:
        """Estimates the wait before the next slot for `key`, without taking it."""
        async with self._lock:
            now = self._clock()
            window = self._window(key)
            self._cleanup(window, now)
            if len(window) < self.max_requests:
                return 0.0
            return max(0.0, window[0] + self.time_window - now)

    def in_flight(self, key: str = GLOBAL_KEY) -> int:
        """Slots recorded for `key` in the current window."""
        window = self._timestamps.get(key)
        if not window:
            return 0
        self._cleanup(window, self._clock())
        return len(window)
