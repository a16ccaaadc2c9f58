"""In-process rolling-window rate limiter keyed by client address."""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict


@dataclass(slots=True)
class RateLimitDecision:
    """Outcome of checking one request against the limiter."""

    allowed: bool
    remaining: int
    retry_after_seconds: int


class SlidingWindowRateLimiter:
    """Allow at most ``max_requests`` per client within ``window_seconds``.

    Timestamps older than the window are pruned on every hit, so memory stays
    proportional to the number of recently active clients.
    """

    def __init__(
        self,
        *,
        max_requests: int = 10,
        window_seconds: float = 900,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self._max_requests = max_requests
        self._window = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> RateLimitDecision:
        """Record a request for ``key`` unless the key is already over the cap."""
        now = self._clock()
        with self._lock:
            self._prune(now)
            bucket = self._hits.setdefault(key, deque())
            if len(bucket) >= self._max_requests:
                retry_after = max(1, int(bucket[0] + self._window - now + 0.999))
                return RateLimitDecision(
                    allowed=False, remaining=0, retry_after_seconds=retry_after
                )
            bucket.append(now)
            return RateLimitDecision(
                allowed=True,
                remaining=self._max_requests - len(bucket),
                retry_after_seconds=0,
            )

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    def _prune(self, now: float) -> None:
        threshold = now - self._window
        for key in list(self._hits):
            bucket = self._hits[key]
            while bucket and bucket[0] <= threshold:
                bucket.popleft()
            if not bucket:
                del self._hits[key]


__all__ = ["RateLimitDecision", "SlidingWindowRateLimiter"]
