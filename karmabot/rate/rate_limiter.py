"""Fixed-window token buckets shared process-wide by key.

A bucket grants ``permits`` hits per ``window`` seconds. The window opens at
the first hit after the previous one expired, so two grants from a
one-permit bucket are always at least one window apart. Buckets live for the
whole process: every sender configured with the same key throttles jointly.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field

from ..constants import RATE_LIMIT_PERMITS, RATE_LIMIT_WINDOW


@dataclass
class RateBucket:
    """One fixed-window bucket; use ``get_bucket`` rather than constructing directly."""

    key: str
    window: float
    permits: int
    window_start: float | None = None
    count: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def _expired(self, now: float) -> bool:
        return self.window_start is None or now >= self.window_start + self.window

    def check(self) -> bool:
        """Consume one permit if available; return whether it was granted."""
        now = time.monotonic()
        with self._lock:
            if self._expired(now):
                self.window_start = now
                self.count = 0
            if self.count < self.permits:
                self.count += 1
                return True
            return False

    def retry_after(self) -> float:
        """Seconds until the next permit becomes available (0 when one is free now)."""
        now = time.monotonic()
        with self._lock:
            if self._expired(now) or self.count < self.permits:
                return 0.0
            return max(0.0, self.window_start + self.window - now)

    def snapshot(self) -> dict[str, object]:
        return {
            "key": self.key,
            "window": self.window,
            "permits": self.permits,
            "count": self.count,
            "retry_after": self.retry_after(),
        }


_BUCKETS: dict[str, RateBucket] = {}
_BUCKETS_LOCK = threading.Lock()


def get_bucket(
    key: str, window: float = RATE_LIMIT_WINDOW, permits: int = RATE_LIMIT_PERMITS
) -> RateBucket:
    """Return the process-wide bucket for ``key``, creating it on first use.

    The window and permits of an existing bucket are kept; a mismatching
    request is logged because it means two senders disagree on the limit.
    """
    if permits < 1 or window <= 0:
        raise ValueError("bucket needs at least one permit and a positive window")
    with _BUCKETS_LOCK:
        bucket = _BUCKETS.get(key)
        if bucket is None:
            bucket = RateBucket(key=key, window=window, permits=permits)
            _BUCKETS[key] = bucket
        elif bucket.window != window or bucket.permits != permits:
            logging.warning(
                f"⚠️ Rate bucket reused with different limits key={key} "
                f"existing={bucket.permits}/{bucket.window}s requested={permits}/{window}s"
            )
        return bucket


def reset_buckets() -> None:
    """Forget every bucket (used by tests and full process restarts)."""
    with _BUCKETS_LOCK:
        _BUCKETS.clear()
