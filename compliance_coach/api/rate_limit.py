import asyncio
import math
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict


@dataclass(frozen=True)
class RateLimitStatus:
    allowed: bool
    limit: int
    remaining: int
    reset_after: int


class SlidingWindowRateLimiter:
    """Per-key request log over a rolling window.

    ``hit`` checks and records under one lock, so concurrent requests from
    the same key are counted atomically within the event loop.
    """

    PRUNE_EVERY = 1000

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.limit = limit
        self.window = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = asyncio.Lock()
        self._calls = 0

    def _expire(self, hits: Deque[float], now: float) -> None:
        cutoff = now - self.window
        while hits and hits[0] <= cutoff:
            hits.popleft()

    def _prune(self, now: float) -> None:
        for key in list(self._hits):
            hits = self._hits[key]
            self._expire(hits, now)
            if not hits:
                del self._hits[key]

    async def hit(self, key: str) -> RateLimitStatus:
        async with self._lock:
            now = self._clock()
            self._calls += 1
            if self._calls % self.PRUNE_EVERY == 0:
                self._prune(now)

            hits = self._hits.setdefault(key, deque())
            self._expire(hits, now)

            allowed = len(hits) < self.limit
            if allowed:
                hits.append(now)

            reset_after = math.ceil(hits[0] + self.window - now) if hits else 0
            return RateLimitStatus(
                allowed=allowed,
                limit=self.limit,
                remaining=max(self.limit - len(hits), 0),
                reset_after=max(reset_after, 0),
            )

    def __len__(self) -> int:
        return len(self._hits)
