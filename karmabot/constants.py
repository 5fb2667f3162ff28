"""
Configuration constants for the karma bot

This module contains all tunable timings used throughout the application.
Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Integer from the environment, or ``default`` (with a printed warning) when unparsable."""
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Float counterpart of ``_get_env_int``."""
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# Connection lifecycle
RECONNECT_DELAY = _get_env_float(
    "RECONNECT_DELAY", 5.0
)  # Fixed wait between two connect attempts
CONNECT_TIMEOUT = _get_env_float(
    "CONNECT_TIMEOUT", 30.0
)  # Upper bound for a single TCP/TLS handshake
READ_CHUNK_SIZE = _get_env_int("READ_CHUNK_SIZE", 4096)  # Bytes per armed read

# Keepalive
KEEPALIVE_INTERVAL = _get_env_float(
    "KEEPALIVE_INTERVAL", 60.0
)  # Quiet period before a PING is sent to the server

# Outbound pacing
PACING_INTERVAL = _get_env_float(
    "PACING_INTERVAL", 0.1
)  # Gap between pacing ticks after a granted send
RATE_LIMIT_WINDOW = _get_env_float("RATE_LIMIT_WINDOW", 1.0)  # Bucket window (seconds)
RATE_LIMIT_PERMITS = _get_env_int("RATE_LIMIT_PERMITS", 1)  # Sends per window
DEFAULT_BUCKET_KEY = os.getenv("DEFAULT_BUCKET_KEY", "irc_send")

# Supervision
SUPERVISOR_RESTART_DELAY = _get_env_float(
    "SUPERVISOR_RESTART_DELAY", 5.0
)  # Wait before restarting a crashed connection actor
MANAGER_LOOP_SLEEP_SECONDS = _get_env_float("MANAGER_LOOP_SLEEP_SECONDS", 0.5)

# Configuration file
DEFAULT_CONFIG_FILE = "karmabot.conf"

# Karma persistence
DEFAULT_KARMA_FILE = "karma.json"
KARMA_WRITE_ATTEMPTS = _get_env_int("KARMA_WRITE_ATTEMPTS", 3)
