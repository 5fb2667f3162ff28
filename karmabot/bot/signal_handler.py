"""SignalHandler - turns process signals into a shutdown flag."""

import logging
import signal
from collections.abc import Iterable

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class SignalHandler:
    """Sets ``shutdown_initiated`` on the first SIGINT/SIGTERM.

    The supervisor loop polls the flag; later signals are ignored while the
    stop is in progress.
    """

    def __init__(self) -> None:
        self.shutdown_initiated = False
        self.received_signal: int | None = None
        self._previous: dict[int, object] = {}

    def stop(self) -> None:
        self.shutdown_initiated = True

    def _handle(self, signum: int, _frame: object | None) -> None:
        if self.shutdown_initiated:
            return
        logging.warning(
            f"🛑 Signal received - initiating shutdown (signal={signal.Signals(signum).name})"
        )
        self.received_signal = signum
        self.shutdown_initiated = True

    def setup_signal_handlers(self, signals: Iterable[int] = SHUTDOWN_SIGNALS) -> None:
        for signum in signals:
            self._previous[signum] = signal.signal(signum, self._handle)

    def restore_signal_handlers(self) -> None:
        for signum, previous in self._previous.items():
            signal.signal(signum, previous)
        self._previous.clear()
