# services/rate_limiter.py
"""
In-memory fixed-window rate limiter keyed by client identifier.

One instance is built per process and shared by every request. State is
lost on restart and is not shared between processes.
"""
from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 60.0
DEFAULT_MAX_REQUESTS = 20
DEFAULT_SWEEP_THRESHOLD = 1000


@dataclass
class RateLimitEntry:
    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float

    def retry_after(self, now: float) -> float:
        """Seconds until the window rolls over (never negative)."""
        return max(0.0, self.reset_at - now)


class RateLimiter:
    """Fixed-window counter: ``max_requests`` per ``window_seconds`` per key."""

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        sweep_threshold: int = DEFAULT_SWEEP_THRESHOLD,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.sweep_threshold = sweep_threshold
        self.clock = clock
        self._entries: dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()
        self._next_sweep_at = 0.0

    def __len__(self) -> int:
        return len(self._entries)

    def now(self) -> float:
        return self.clock()

    def check(self, identifier: str) -> RateLimitResult:
        """Count one request for ``identifier`` and report whether it may proceed.

        Blocked calls do not consume quota.
        """
        with self._lock:
            now = self.clock()
            if len(self._entries) > self.sweep_threshold:
                self._sweep(now)

            entry = self._entries.get(identifier)
            # A window whose reset instant has been reached is over.
            if entry is None or entry.reset_at <= now:
                entry = RateLimitEntry(count=1, reset_at=now + self.window_seconds)
                self._entries[identifier] = entry
                return RateLimitResult(True, self.max_requests - 1, entry.reset_at)

            if entry.count >= self.max_requests:
                return RateLimitResult(False, 0, entry.reset_at)

            entry.count += 1
            return RateLimitResult(True, self.max_requests - entry.count, entry.reset_at)

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()
            self._next_sweep_at = 0.0

    def _sweep(self, now: float) -> None:
        # At most one full scan per window.
        if now < self._next_sweep_at:
            return
        expired = [key for key, entry in self._entries.items() if entry.reset_at <= now]
        for key in expired:
            del self._entries[key]
        self._next_sweep_at = now + self.window_seconds
        logger.info(
            "RateLimiter: evicted %d expired entries (%d tracked)",
            len(expired), len(self._entries),
        )
