"""
Simple in-memory rate limiter for auth endpoints.
"""

import time
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Lock

from portal.settings import settings


@dataclass
class RateLimitEntry:
    """Request timestamps for one key."""

    requests: list[float] = field(default_factory=list)
    lock: Lock = field(default_factory=Lock)


class RateLimiter:
    """Sliding one-minute window per key.

    Keys with no requests left in the window are dropped once per window,
    so the table only holds clients seen in the last minute or so.
    """

    def __init__(self, requests_per_minute: int = 10, clock: Callable[[], float] = time.monotonic):
        self.requests_per_minute = requests_per_minute
        self.window_seconds = 60
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = defaultdict(RateLimitEntry)
        self._last_prune = clock()

    def is_allowed(self, key: str) -> bool:
        """Check if request is allowed for the given key, recording it if so."""
        now = self._clock()
        window_start = now - self.window_seconds

        if now - self._last_prune >= self.window_seconds:
            self._prune(window_start)
            self._last_prune = now

        entry = self._entries[key]
        with entry.lock:
            entry.requests = [t for t in entry.requests if t > window_start]

            if len(entry.requests) < self.requests_per_minute:
                entry.requests.append(now)
                return True

            return False

    def _prune(self, window_start: float) -> None:
        stale = [
            key for key, entry in list(self._entries.items())
            if not any(t > window_start for t in entry.requests)
        ]
        for key in stale:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)

    def reset(self) -> None:
        self._entries.clear()


auth_rate_limiter = RateLimiter(requests_per_minute=settings.rate_limit_auth_per_minute)
