from __future__ import annotations

import signal
from unittest.mock import patch

from karmabot.bot.signal_handler import SignalHandler


def registered_handlers(handler):
    with patch("signal.signal") as mock_signal:
        handler.setup_signal_handlers()
    return {call[0][0]: call[0][1] for call in mock_signal.call_args_list}


def test_sigint_and_sigterm_initiate_shutdown():
    for signum in (signal.SIGINT, signal.SIGTERM):
        handler = SignalHandler()
        handlers = registered_handlers(handler)
        assert set(handlers) == {signal.SIGINT, signal.SIGTERM}
        handlers[signum](signum, None)
        assert handler.shutdown_initiated is True
        assert handler.received_signal == signum


def test_repeated_signal_is_idempotent(caplog):
    handler = SignalHandler()
    handlers = registered_handlers(handler)
    handlers[signal.SIGINT](signal.SIGINT, None)
    handlers[signal.SIGINT](signal.SIGINT, None)
    assert caplog.text.count("Signal received") == 1


def test_stop_sets_flag():
    handler = SignalHandler()
    handler.stop()
    assert handler.shutdown_initiated is True


def test_restore_reinstalls_previous_handlers():
    handler = SignalHandler()
    with patch("signal.signal", return_value="previous") as mock_signal:
        handler.setup_signal_handlers()
        handler.restore_signal_handlers()
    restored = mock_signal.call_args_list[2:]
    assert [(c[0][0], c[0][1]) for c in restored] == [
        (signal.SIGINT, "previous"),
        (signal.SIGTERM, "previous"),
    ]
    assert handler.received_signal is None
