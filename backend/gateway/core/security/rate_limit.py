"""Sliding-window rate limiter.

Each key owns a log of request timestamps (milliseconds). A request is
admitted when fewer than ``limit`` timestamps fall inside the window ending
now. Counters are per-process; multi-replica deployments need a shared store
behind the same ``check`` interface.
"""

import asyncio
import logging
import math
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict

from gateway.core.config import settings

logger = logging.getLogger(__name__)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single rate-limit check."""

    allowed: bool
    remaining: int
    reset_ms: int

    @property
    def retry_after(self) -> int:
        """Seconds until the oldest counted request leaves the window."""
        return max(0, math.ceil(self.reset_ms / 1000))


class _Bucket:
    """Timestamp log for one key, guarded by its own lock."""

    __slots__ = ("lock", "timestamps", "retired")

    def __init__(self):
        self.lock = threading.Lock()
        self.timestamps: Deque[float] = deque()
        # Set once the sweeper dropped the bucket from the map
        self.retired = False

    def prune(self, now: float, window_ms: float) -> None:
        timestamps = self.timestamps
        while timestamps and now - timestamps[0] >= window_ms:
            timestamps.popleft()


class RateLimiter:
    """In-memory per-key sliding-window rate limiter."""

    def __init__(
        self,
        clock: Callable[[], float] = _monotonic_ms,
        sweep_interval: float | None = None,
        stale_after_ms: int | None = None,
    ):
        """
        Initialize rate limiter.

        Args:
            clock: Returns the current time in milliseconds
            sweep_interval: Seconds between background sweeps
            stale_after_ms: Timestamps older than this are dropped by a sweep
        """
        self._clock = clock
        self.sweep_interval = (
            sweep_interval if sweep_interval is not None else settings.rate_limit_sweep_interval
        )
        self.stale_after_ms = (
            stale_after_ms if stale_after_ms is not None else settings.rate_limit_stale_after_ms
        )
        self._buckets: Dict[str, _Bucket] = {}
        self._buckets_lock = threading.Lock()
        self._sweep_task: asyncio.Task | None = None

    def _get_bucket(self, key: str) -> _Bucket:
        with self._buckets_lock:
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = _Bucket()
                self._buckets[key] = bucket
            return bucket

    def check(self, key: str, limit: int, window_ms: int) -> RateLimitDecision:
        """
        Check and record a request for ``key``.

        The prune-count-append sequence runs under the bucket lock, so
        concurrent callers on one key can never be admitted past ``limit``.
        Rejected attempts are not recorded.

        Args:
            key: Bucket key, usually "<operation>:<client id>"
            limit: Maximum requests within the window
            window_ms: Window length in milliseconds

        Returns:
            RateLimitDecision
        """
        while True:
            bucket = self._get_bucket(key)
            with bucket.lock:
                if bucket.retired:
                    # Lost a race with the sweeper, fetch the replacement bucket
                    continue

                now = self._clock()
                bucket.prune(now, window_ms)

                count = len(bucket.timestamps)
                remaining = max(0, limit - count)
                oldest = bucket.timestamps[0] if bucket.timestamps else now
                reset_ms = max(0, int(oldest + window_ms - now))

                if count >= limit:
                    return RateLimitDecision(allowed=False, remaining=0, reset_ms=reset_ms)

                bucket.timestamps.append(now)
                return RateLimitDecision(allowed=True, remaining=remaining - 1, reset_ms=reset_ms)

    def sweep(self, now: float | None = None) -> int:
        """
        Drop stale timestamps and forget keys with nothing left.

        Locks one bucket at a time so foreground checks are never starved.

        Returns:
            Number of buckets removed
        """
        if now is None:
            now = self._clock()

        with self._buckets_lock:
            items = list(self._buckets.items())

        removed = 0
        for key, bucket in items:
            with bucket.lock:
                bucket.prune(now, self.stale_after_ms)
                if bucket.timestamps:
                    continue
                with self._buckets_lock:
                    if self._buckets.get(key) is bucket:
                        del self._buckets[key]
                        bucket.retired = True
                        removed += 1

        if removed:
            logger.debug("Rate limiter sweep removed %d idle keys", removed)
        return removed

    def snapshot(self) -> Dict[str, int]:
        """Return the number of recorded requests per key."""
        with self._buckets_lock:
            items = list(self._buckets.items())
        result = {}
        for key, bucket in items:
            with bucket.lock:
                result[key] = len(bucket.timestamps)
        return result

    def reset(self) -> None:
        """Forget every key."""
        with self._buckets_lock:
            for bucket in self._buckets.values():
                bucket.retired = True
            self._buckets.clear()

    @property
    def is_running(self) -> bool:
        """Check if the background sweep task is active."""
        return self._sweep_task is not None and not self._sweep_task.done()

    async def start(self):
        """Start the periodic background sweep."""
        if self.is_running:
            return
        self._sweep_task = asyncio.create_task(self._sweep_loop())

    async def stop(self):
        """Cancel the background sweep and wait for it to finish."""
        task, self._sweep_task = self._sweep_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _sweep_loop(self):
        while True:
            await asyncio.sleep(self.sweep_interval)
            try:
                self.sweep()
            except Exception:
                logger.exception("Rate limiter sweep failed")


# Global rate limiter instance
_rate_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """Get global rate limiter instance."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter()
    return _rate_limiter
