"""Rate limited outbound queue."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable

from ..constants import PACING_INTERVAL
from ..logs.logger import logger
from ..rate.rate_limiter import RateBucket
from .keepalive import KeepaliveScheduler
from .timers import DebouncedTimer


class RateLimitedSender:
    """FIFO of raw lines drained one at a time through a token bucket.

    The sender is ``armed`` while its pacing timer is pending and ``idle``
    otherwise. Each tick either transmits the head of the queue (bucket
    granted), waits for the bucket's retry delay (denied), or, when the queue
    is empty, hands control to the keepalive scheduler and goes idle.
    """

    def __init__(
        self,
        bucket: RateBucket,
        transmit: Callable[[str], None],
        pacing_timer: DebouncedTimer,
        keepalive: KeepaliveScheduler,
        pacing_interval: float = PACING_INTERVAL,
    ) -> None:
        self.bucket = bucket
        self.pacing_timer = pacing_timer
        self.keepalive = keepalive
        self.pacing_interval = pacing_interval
        self._transmit = transmit
        self._queue: deque[str] = deque()
        self.sent_count = 0

    def __len__(self) -> int:
        return len(self._queue)

    @property
    def state(self) -> str:
        return "armed" if self.pacing_timer.pending else "idle"

    @property
    def queued(self) -> list[str]:
        return list(self._queue)

    def enqueue(self, line: str) -> None:
        self._queue.append(line)
        # A probe must not go out while lines are waiting
        self.keepalive.cancel()
        if not self.pacing_timer.pending:
            self.pacing_timer.reschedule(0)

    def on_tick(self) -> None:
        """Handle one pacing timer firing.

        Raises:
            NetworkError: If the transport rejects the write; the line stays queued.
        """
        if not self._queue:
            self.keepalive.reset()
            return

        if not self.bucket.check():
            retry_in = self.bucket.retry_after()
            self.keepalive.cancel()
            self.pacing_timer.reschedule(retry_in)
            logger.log_event(
                "sender",
                "rate_limited",
                level=logging.DEBUG,
                retry_in=round(retry_in, 3),
                queued=len(self._queue),
            )
            return

        line = self._queue[0]
        self._transmit(line)
        self._queue.popleft()
        self.sent_count += 1
        self.keepalive.cancel()
        self.pacing_timer.reschedule(self.pacing_interval)
        logger.log_event("sender", "sent", level=logging.DEBUG, line=line)

    def clear(self) -> int:
        """Drop every queued line and stop pacing; returns how many were dropped."""
        dropped = len(self._queue)
        self._queue.clear()
        self.pacing_timer.cancel()
        return dropped
