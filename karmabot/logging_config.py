"""
Process-wide logging setup for the karma bot.

``LoggerConfigurator`` installs a colorlog handler on the root logger.
``log_structured_error`` is the single path for reporting failures: it logs a
``[TYPE] message | Exception | Context`` line and feeds ``error_aggregator``,
whose per-type summary is printed when the process exits.
"""

import atexit
import logging
import os
import sys
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any

import colorlog

MAX_OCCURRENCES_PER_TYPE = 500

LOG_FORMAT = "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s"
LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "magenta",
}


def debug_enabled() -> bool:
    return os.environ.get("DEBUG", "").lower() in ("true", "1", "yes")


@dataclass
class _ErrorBucket:
    count: int = 0
    recent: deque = field(default_factory=lambda: deque(maxlen=MAX_OCCURRENCES_PER_TYPE))


class ErrorAggregator:
    """Counts reported errors by type and keeps the most recent occurrences."""

    def __init__(self):
        self._buckets: dict[str, _ErrorBucket] = {}
        self._lock = threading.Lock()
        self.start_time = time.time()

    def record_error(self, error_type: str, message: str, context: dict[str, Any] = None) -> None:
        occurrence = {"timestamp": time.time(), "message": message, "context": context or {}}
        with self._lock:
            bucket = self._buckets.setdefault(error_type, _ErrorBucket())
            bucket.count += 1
            bucket.recent.append(occurrence)

    def get_error_summary(self) -> dict[str, Any]:
        """Per type: retained occurrence count, hourly rate and the last occurrence."""
        with self._lock:
            hours = max((time.time() - self.start_time) / 3600, 1)
            return {
                error_type: {
                    "total_count": len(bucket.recent),
                    "seen": bucket.count,
                    "rate_per_hour": bucket.count / hours,
                    "last_occurrence": bucket.recent[-1] if bucket.recent else None,
                }
                for error_type, bucket in self._buckets.items()
            }

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()
            self.start_time = time.time()

    def log_summary_report(self) -> None:
        summary = self.get_error_summary()
        if not summary:
            logging.info("No errors recorded in current session")
            return
        logging.warning("🚨 ERROR SUMMARY REPORT")
        for error_type, stats in sorted(summary.items()):
            logging.warning(
                f"  {error_type}: {stats['seen']} total, {stats['rate_per_hour']:.1f}/hour"
            )
            last = stats["last_occurrence"]
            if last:
                logging.warning(f"    Last: {last['message']}")


error_aggregator = ErrorAggregator()


def log_structured_error(
    error_type: str,
    message: str,
    exception: BaseException = None,
    context: dict[str, Any] = None,
    level: int = logging.ERROR,
) -> None:
    """Log one failure and count it in ``error_aggregator``.

    Args:
        error_type: Category used for aggregation ('network', 'config', 'karma', ...)
        message: What failed
        exception: The exception that occurred (optional)
        context: Extra ``k=v`` pairs for the log line
        level: Logging level (default: ERROR)
    """
    parts = [f"[{error_type.upper()}] {message}"]
    if exception is not None:
        parts.append(f"Exception: {type(exception).__name__}: {exception}")
    if context:
        parts.append("Context: " + " | ".join(f"{k}={v}" for k, v in context.items()))
    logging.log(level, " | ".join(parts))
    error_aggregator.record_error(error_type, message, context)


class LoggerConfigurator:
    """Configures the root logger with colorlog output on stderr.

    The level is DEBUG when the ``DEBUG`` environment variable is set to
    true/1/yes and INFO otherwise.
    """

    def __init__(self, stream=None):
        self.stream = stream or sys.stderr

    @staticmethod
    def build_formatter() -> colorlog.ColoredFormatter:
        return colorlog.ColoredFormatter(
            LOG_FORMAT,
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors=LEVEL_COLORS,
            secondary_log_colors={"message": {"ERROR": "red", "CRITICAL": "magenta"}},
            reset=True,
        )

    def configure(self) -> int:
        """Install the handler and exit summary; returns the chosen level."""
        level = logging.DEBUG if debug_enabled() else logging.INFO
        formatter = self.build_formatter()

        handler = logging.StreamHandler(self.stream)
        handler.setFormatter(formatter)
        logging.basicConfig(level=level, handlers=[handler])

        root = logging.getLogger()
        root.setLevel(level)
        for existing in root.handlers:
            existing.setFormatter(formatter)

        # Observer threads log every inotify event at DEBUG
        logging.getLogger("watchdog").setLevel(logging.INFO)

        atexit.register(self._log_final_error_summary)
        return level

    @staticmethod
    def _log_final_error_summary() -> None:
        logging.info("📊 Final error summary before shutdown:")
        error_aggregator.log_summary_report()
