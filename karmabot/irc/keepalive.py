"""Keepalive probe scheduling."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..constants import KEEPALIVE_INTERVAL
from ..logs.logger import logger
from .timers import DebouncedTimer


class KeepaliveScheduler:
    """Sends ``PING <server token>`` after a quiet period.

    The sender resets the timer whenever it goes idle and cancels it while it
    is transmitting, so a probe never races real traffic.
    """

    def __init__(
        self,
        timer: DebouncedTimer,
        transmit: Callable[[str], None],
        server_token: Callable[[], str | None],
        interval: float = KEEPALIVE_INTERVAL,
    ) -> None:
        self.timer = timer
        self.interval = interval
        self._transmit = transmit
        self._server_token = server_token
        self.probes_sent = 0

    @property
    def pending(self) -> bool:
        return self.timer.pending

    def reset(self) -> None:
        self.timer.reschedule(self.interval)

    def cancel(self) -> None:
        self.timer.cancel()

    def probe_line(self) -> str:
        token = self._server_token()
        return f"PING {token}" if token else "PING"

    def fire(self) -> None:
        line = self.probe_line()
        self._transmit(line)
        self.probes_sent += 1
        logger.log_event(
            "irc", "keepalive_probe", level=logging.DEBUG, token=self._server_token()
        )
        self.reset()
