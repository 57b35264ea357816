"""
Per-key sliding-window rate limiting.

In-memory and single-process; counters reset when the process restarts.
"""

import threading
import time
from collections import deque
from typing import Callable, Dict

from loguru import logger

from stockcal.config import settings
from stockcal.utils.errors import RateLimitError


class RateLimiter:
    """
    Sliding-window limiter keyed by an arbitrary string (user id, endpoint).
    """

    def __init__(self, requests: int = 1, period: float = 60, clock: Callable[[], float] = time.time):
        """
        Args:
            requests: Number of requests allowed per period
            period: Time period in seconds
            clock: Time source, injectable for tests
        """
        self.requests = requests
        self.period = period
        self.clock = clock
        self._buckets: Dict[str, deque] = {}
        self._lock = threading.Lock()

    def acquire(self, key: str) -> None:
        """
        Record a request for ``key``.

        Raises:
            RateLimitError: If the key already used its allowance in the window
        """
        if not settings.rate_limit_enabled:
            return

        with self._lock:
            now = self.clock()
            self._prune(now)
            bucket = self._buckets.setdefault(key, deque())

            # Remove expired timestamps
            while bucket and bucket[0] <= now - self.period:
                bucket.popleft()

            if len(bucket) >= self.requests:
                wait_time = self.period - (now - bucket[0])
                logger.warning(
                    f"Rate limit reached for {key}: {len(bucket)}/{self.requests} requests in {self.period}s. "
                    f"Retry after {wait_time:.2f}s"
                )
                raise RateLimitError(
                    "Rate limit exceeded. Please wait before syncing again.",
                    retry_after=int(wait_time) + 1,
                    details={"retry_after": int(wait_time) + 1},
                )

            bucket.append(now)

    def _prune(self, now: float) -> None:
        """Drop keys whose newest request has left the window."""
        stale = [k for k, bucket in self._buckets.items() if not bucket or bucket[-1] <= now - self.period]
        for k in stale:
            del self._buckets[k]

    def reset(self, key: str) -> None:
        """Reset rate limit for a specific key."""
        with self._lock:
            self._buckets.pop(key, None)

    def reset_all(self) -> None:
        with self._lock:
            self._buckets.clear()
        logger.debug("All rate limits reset")


# One portfolio sync per user per window
portfolio_sync_limiter = RateLimiter(requests=1, period=settings.portfolio_sync_window_seconds)
