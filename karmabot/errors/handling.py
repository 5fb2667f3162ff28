from __future__ import annotations

from ..logging_config import log_structured_error
from .internal import ConfigError, InternalError, KarmaError, NetworkError, ParsingError


def classify_error(error: BaseException) -> str:
    """Map an exception onto the error type used for aggregation."""
    if isinstance(error, NetworkError | OSError | ConnectionError | TimeoutError):
        return "network"
    if isinstance(error, ConfigError):
        return "config"
    if isinstance(error, ParsingError | UnicodeDecodeError):
        return "parsing"
    if isinstance(error, KarmaError):
        return "karma"
    if isinstance(error, InternalError):
        return "internal"
    return "unknown"


def log_error(message: str, error: BaseException, context: dict | None = None) -> None:
    """Logs an error message with the associated exception details.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
    """
    log_structured_error(
        error_type=classify_error(error),
        message=f"{message}: {str(error)}",
        exception=error,
        context=context,
    )
