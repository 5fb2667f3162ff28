"""Plain or TLS stream transport with edge-triggered reads."""

from __future__ import annotations

import asyncio
import logging
import ssl
from collections.abc import Awaitable, Callable

from ..constants import READ_CHUNK_SIZE
from ..errors.internal import NetworkError
from ..logs.logger import logger

Deliver = Callable[["Transport", bytes, BaseException | None], None]
Connector = Callable[[str, int, bool, Deliver], Awaitable["Transport"]]


class Transport:
    """Owns one socket.

    Reads are armed explicitly: each ``rearm`` performs exactly one read and
    hands the result to ``deliver``. An empty chunk means EOF. Writes are
    buffered by asyncio and never awaited by the caller.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        deliver: Deliver,
        *,
        encrypted: bool = False,
        chunk_size: int = READ_CHUNK_SIZE,
    ) -> None:
        self.reader = reader
        self.writer = writer
        self.encrypted = encrypted
        self.chunk_size = chunk_size
        self._deliver = deliver
        self._read_task: asyncio.Task[None] | None = None
        self._closed = False

    @classmethod
    async def open(
        cls, host: str, port: int, encrypted: bool, deliver: Deliver
    ) -> Transport:
        ssl_context = ssl.create_default_context() if encrypted else None
        try:
            reader, writer = await asyncio.open_connection(host, port, ssl=ssl_context)
        except OSError as e:
            raise NetworkError(f"connect to {host}:{port} failed: {e}") from e
        return cls(reader, writer, deliver, encrypted=encrypted)

    @property
    def closed(self) -> bool:
        return self._closed or self.writer.is_closing()

    @property
    def armed(self) -> bool:
        return self._read_task is not None and not self._read_task.done()

    def send(self, line: str) -> None:
        if self.closed:
            raise NetworkError("socket is closed")
        try:
            self.writer.write(f"{line}\r\n".encode())
        except (OSError, RuntimeError) as e:
            raise NetworkError(f"send failed: {e}") from e

    def rearm(self) -> None:
        if self.closed:
            return
        if self.armed:
            logger.log_event("irc", "transport_rearm_ignored", level=logging.DEBUG)
            return
        self._read_task = asyncio.create_task(self._read_once())

    async def _read_once(self) -> None:
        try:
            data = await self.reader.read(self.chunk_size)
        except (OSError, asyncio.IncompleteReadError) as e:
            self._deliver(self, b"", NetworkError(f"receive failed: {e}"))
            return
        self._deliver(self, data, None)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._read_task is not None and not self._read_task.done():
            self._read_task.cancel()
        self._read_task = None
        self.writer.close()


open_transport: Connector = Transport.open
