"""
Shared building blocks for source clients: registry metadata, a
minimum-interval rate limiter and capped exponential backoff.

Clients never raise fetch failures to their callers; they return a
FetchResult whose `error` names what went wrong.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from services.api.reports.types import RawPost

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceRegistry:
    """Source registration metadata."""
    name: str
    base_url: str
    user_agent: str
    min_request_interval_s: float = 3.0


@dataclass
class FetchResult:
    """Posts from one fetch, plus an error indicator when it failed."""
    posts: list[RawPost] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class MinIntervalRateLimiter:
    """
    Enforces a fixed minimum delay between consecutive requests.

    Requests are sequential; the lock only keeps two coroutines sharing a
    client from reading the same last-request time.
    """

    def __init__(
        self,
        min_interval_s: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.min_interval_s = min_interval_s
        self._clock = clock
        self._sleep = sleep
        self._last_request: Optional[float] = None
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        async with self._lock:
            if self._last_request is not None:
                elapsed = self._clock() - self._last_request
                wait = self.min_interval_s - elapsed
                if wait > 0:
                    logger.debug("Rate limiting: waiting %.2fs before next request", wait)
                    await self._sleep(wait)
            self._last_request = self._clock()

    def is_limited(self) -> bool:
        """True while the next request would have to wait."""
        if self._last_request is None:
            return False
        return self._clock() - self._last_request < self.min_interval_s

    def reset(self) -> None:
        self._last_request = None


def backoff_delay(attempt: int, base_delay_s: float, max_delay_s: float) -> float:
    """Delay before retry `attempt` (0-based): base * 2**attempt, capped."""
    return min(base_delay_s * (2 ** attempt), max_delay_s)
