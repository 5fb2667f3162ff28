"""Line framing and field splitting for inbound IRC traffic."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..logs.logger import logger
from .models import FrameKind

MAX_FIELDS = 4
MAX_BUFFER_BYTES = 64 * 1024


class LineFramer:
    """Buffers raw chunks and yields complete CRLF or LF terminated lines."""

    def __init__(self, encoding: str = "utf-8", max_buffer: int = MAX_BUFFER_BYTES) -> None:
        self.encoding = encoding
        self.max_buffer = max_buffer
        self._buffer = b""
        self._discarding = False

    def feed(self, data: bytes) -> list[str]:
        if self._discarding:
            # Still inside an oversize line; skip through its terminator
            end = data.find(b"\n")
            if end < 0:
                return []
            data = data[end + 1 :]
            self._discarding = False
        self._buffer += data
        *complete, self._buffer = self._buffer.split(b"\n")
        if len(self._buffer) > self.max_buffer:
            logger.log_event(
                "irc",
                "unhandled",
                level=logging.WARNING,
                human=f"Dropping {len(self._buffer)} unterminated bytes",
                raw=self._buffer[:80],
            )
            self._buffer = b""
            self._discarding = True
        lines = []
        for raw in complete:
            text = raw.rstrip(b"\r").decode(self.encoding, errors="replace")
            if text:
                lines.append(text)
        return lines

    def reset(self) -> None:
        self._buffer = b""
        self._discarding = False

    @property
    def pending_bytes(self) -> int:
        return len(self._buffer)


@dataclass(frozen=True, slots=True)
class Frame:
    """One inbound line split into at most four space separated fields.

    Field 0 is an origin (``:nick!user@host`` or ``:server``) when it starts
    with ``:``, otherwise it is the command itself. The last field keeps any
    embedded spaces.
    """

    raw: str
    fields: tuple[str, ...]

    def field(self, index: int) -> str | None:
        if 0 <= index < len(self.fields):
            return self.fields[index]
        return None

    @property
    def origin(self) -> str | None:
        first = self.field(0)
        if first and first.startswith(":") and len(first) > 1:
            return first
        return None

    @property
    def command(self) -> str | None:
        return self.field(1) if self.origin else self.field(0)

    @property
    def nick(self) -> str | None:
        """Nick part of the origin (``:alice!a@host`` -> ``alice``)."""
        if not self.origin:
            return None
        return self.origin[1:].split("!", 1)[0]

    @property
    def target(self) -> str | None:
        return self.field(2) if self.origin else self.field(1)

    @property
    def text(self) -> str | None:
        """Trailing parameter of an origin-prefixed line, without its ``:`` marker."""
        value = self.field(3) if self.origin else None
        if value is None:
            return None
        return value[1:] if value.startswith(":") else value

    @property
    def ping_token(self) -> str:
        """Everything after the PING keyword, echoed verbatim in the PONG."""
        return " ".join(self.fields[1:]).strip()

    @property
    def kind(self) -> FrameKind:
        command = (self.command or "").upper()
        if not command:
            return FrameKind.EMPTY
        if command == "PING" and self.origin is None:
            return FrameKind.PING
        if command == "PONG":
            return FrameKind.PONG
        if command == "ERROR":
            return FrameKind.ERROR
        if command == "PRIVMSG" and self.origin and self.target and self.text is not None:
            return FrameKind.PRIVMSG
        return FrameKind.OTHER


def parse_frame(line: str) -> Frame:
    """Split ``line`` into a ``Frame``; short lines simply have fewer fields."""
    line = line.rstrip("\r\n")
    fields = tuple(line.split(" ", MAX_FIELDS - 1)) if line else ()
    return Frame(raw=line, fields=fields)
