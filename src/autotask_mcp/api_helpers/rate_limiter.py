"""Autotask request rate limiting.

Autotask enforces a per-database request budget shared by every integration
that talks to it. All requests made by this process go through one shared
limiter, acquired *before* each request, so helpers and concurrent tasks draw
from a single budget.
"""

import asyncio
import time
from collections import deque
from functools import lru_cache

from autotask_mcp.config import get_settings

WINDOW_SECONDS = 60.0


class ApiRateLimiter:
    """Asynchronous limiter for request start times.

    Each caller reserves the earliest start slot that keeps a minimum spacing
    between starts and at most ``max_per_minute`` starts in any rolling
    60-second window, then sleeps until that slot. Reservation never awaits,
    so concurrent tasks in one event loop are handed distinct, ordered slots
    and can wait in parallel.

    Args:
        min_interval_seconds: Minimum spacing between request starts.
        max_per_minute: Maximum starts in the last 60 seconds; 0 disables it.
    """

    def __init__(
        self, *, min_interval_seconds: float = 0.1, max_per_minute: int = 150
    ) -> None:
        self._min_interval = max(float(min_interval_seconds), 0.0)
        self._max_per_minute = int(max_per_minute)
        # Reserved start slots in ascending order; may lie in the future.
        self._slots: deque[float] = deque()

    def _reserve(self, now: float) -> float:
        while self._slots and self._slots[0] <= now - WINDOW_SECONDS:
            self._slots.popleft()

        slot = now
        if self._slots:
            slot = max(slot, self._slots[-1] + self._min_interval)
        if 0 < self._max_per_minute <= len(self._slots):
            slot = max(slot, self._slots[-self._max_per_minute] + WINDOW_SECONDS)

        self._slots.append(slot)
        while self._slots[0] <= slot - WINDOW_SECONDS:
            self._slots.popleft()
        return slot

    async def acquire(self) -> float:
        """Wait until a new request may start; return the seconds waited."""
        now = time.time()
        wait = self._reserve(now) - now
        if wait > 0:
            await asyncio.sleep(wait)
            return wait
        return 0.0

    @property
    def recent_requests(self) -> int:
        """Number of start slots reserved in the current window."""
        return len(self._slots)


@lru_cache(maxsize=1)
def get_shared_rate_limiter() -> ApiRateLimiter:
    """Return the process-wide limiter used by every ``AutotaskClient``.

    Limits come from ``Settings.rate_limit_min_interval`` and
    ``Settings.rate_limit_max_per_minute``. Call
    ``get_shared_rate_limiter.cache_clear()`` to rebuild it in tests.
    """
    settings = get_settings()
    return ApiRateLimiter(
        min_interval_seconds=settings.rate_limit_min_interval,
        max_per_minute=settings.rate_limit_max_per_minute,
    )
