"""Error hierarchy and logging helpers."""

from .handling import classify_error, log_error
from .internal import ConfigError, InternalError, KarmaError, NetworkError, ParsingError

__all__ = [
    "ConfigError",
    "InternalError",
    "KarmaError",
    "NetworkError",
    "ParsingError",
    "classify_error",
    "log_error",
]
