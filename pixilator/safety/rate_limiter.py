"""Per-client fixed-window rate limiter.

Admission model:
    - One entry per client key: `count` and `window_reset_at`.
    - A call at or after `window_reset_at` (or with no entry) starts a fresh
      window with `count = 1`.
    - Inside a window, calls are admitted while `count < max_requests`.
    - Rejected calls do not change the entry.

Concurrency:
    Check-and-increment is atomic per key: each entry owns a lock, and a short
    registry lock only guards entry creation. Unrelated clients never wait on
    each other beyond that dictionary lookup.

Known limitations:
    - Process-local only: no persistence across restarts, no coordination across
      multiple instances.
    - Entries are never evicted; their lifetime is the process lifetime.
"""

import logging
import os
import threading
import time
from dataclasses import dataclass, field


logger = logging.getLogger(__name__)

RATE_LIMIT_WINDOW_SECONDS = float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "3600"))
RATE_LIMIT_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "10"))


@dataclass
class RateLimitEntry:
    client_key: str
    count: int = 0
    window_reset_at: float = 0.0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


class RateLimiter:
    """Fixed-window request counter keyed by client identifier.

    Args:
        max_requests: Requests admitted per window and key.
        window_seconds: Window length.
        clock: Wall-clock source in seconds, injectable for tests.
    """

    def __init__(
        self,
        max_requests: int = RATE_LIMIT_MAX_REQUESTS,
        window_seconds: float = RATE_LIMIT_WINDOW_SECONDS,
        clock=time.time,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = {}
        self._registry_lock = threading.Lock()

    def _entry_for(self, client_key: str) -> RateLimitEntry:
        with self._registry_lock:
            entry = self._entries.get(client_key)
            if entry is None:
                entry = RateLimitEntry(client_key=client_key)
                self._entries[client_key] = entry
            return entry

    def admit(self, client_key: str) -> bool:
        """Record one request for `client_key` and return whether it is admitted."""
        entry = self._entry_for(client_key)

        with entry.lock:
            now = self._clock()

            if entry.count == 0 or now >= entry.window_reset_at:
                entry.count = 1
                entry.window_reset_at = now + self.window_seconds
                return True

            if entry.count < self.max_requests:
                entry.count += 1
                return True

        logger.warning("Rate limit exceeded for client %s", client_key)
        return False

    def entry(self, client_key: str) -> RateLimitEntry | None:
        """Return a detached snapshot of the entry for `client_key`, if any."""
        with self._registry_lock:
            entry = self._entries.get(client_key)
        if entry is None:
            return None
        with entry.lock:
            return RateLimitEntry(
                client_key=entry.client_key,
                count=entry.count,
                window_reset_at=entry.window_reset_at,
            )

    def reset(self) -> None:
        with self._registry_lock:
            self._entries.clear()
