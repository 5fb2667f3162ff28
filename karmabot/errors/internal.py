"""Exception types shared across the bot.

Low level errors (``OSError``, pydantic ``ValidationError``) are wrapped into
one of these where they cross a module boundary, so callers only need to know
which category they are handling:

- ``NetworkError`` drives the connection actor's reconnect path.
- ``ConfigError`` stops an actor or the process from starting.
- ``KarmaError`` becomes the apology reply in the channel.
- ``ParsingError`` marks inbound data that cannot be framed.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Root of the bot's exception tree.

    Attributes:
        data: Structured context for logs; a private copy of what was passed.
    """

    def __init__(self, message: str, *, data: Mapping[str, object] | None = None) -> None:
        super().__init__(message)
        self.data: dict[str, object] = dict(data or {})


class NetworkError(InternalError):
    """Connect, send or receive failed; the session is gone."""


class ParsingError(InternalError):
    pass


class ConfigError(InternalError):
    """Configuration is missing required fields or has invalid values."""


class KarmaError(InternalError):
    """A karma update was rejected or could not be stored.

    Args:
        message: Human readable reason.
        what: The normalized key the update was attempted for.
    """

    def __init__(self, message: str, *, what: str = "") -> None:
        super().__init__(message, data={"what": what})
        self.what = what


__all__ = [
    "ConfigError",
    "InternalError",
    "KarmaError",
    "NetworkError",
    "ParsingError",
]
