"""Connection actor: connect, register, pace, keep alive, reconnect."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from ..config.core import build_bot_config
from ..config.model import BotConfig
from ..constants import (
    CONNECT_TIMEOUT,
    KEEPALIVE_INTERVAL,
    PACING_INTERVAL,
    RATE_LIMIT_PERMITS,
    RATE_LIMIT_WINDOW,
    RECONNECT_DELAY,
)
from ..errors.internal import NetworkError
from ..logs.logger import logger
from ..rate.rate_limiter import get_bucket
from .framer import LineFramer, parse_frame
from .keepalive import KeepaliveScheduler
from .models import ConnectDone, ConnectionState, FrameKind, Inbound, Stop, TimerFired
from .router import CounterStore, MessageRouter
from .sender import RateLimitedSender
from .timers import DebouncedTimer
from .transport import Connector, Transport, open_transport

Event = TimerFired | ConnectDone | Inbound | Stop


class IRCBot:  # pylint: disable=too-many-instance-attributes
    """Single IRC connection driven by one mailbox.

    Socket reads, connect results and timer firings are all posted to the
    mailbox and handled one at a time by ``run``, so the state below has a
    single writer. ``run`` never returns on its own: connection losses go back
    through ``RECONNECT_DELAY``. It returns after ``stop`` and raises only on
    unexpected errors, leaving restarts to the supervisor.

    Raises:
        ConfigError: At construction, if ``config`` lacks required fields.
    """

    def __init__(
        self,
        config: BotConfig | Mapping[str, Any],
        store: CounterStore,
        *,
        connector: Connector = open_transport,
        reconnect_delay: float = RECONNECT_DELAY,
        connect_timeout: float = CONNECT_TIMEOUT,
        keepalive_interval: float = KEEPALIVE_INTERVAL,
        pacing_interval: float = PACING_INTERVAL,
        rate_window: float = RATE_LIMIT_WINDOW,
        rate_permits: int = RATE_LIMIT_PERMITS,
    ) -> None:
        self.config = build_bot_config(config)
        self.store = store
        self.connector = connector
        self.reconnect_delay = reconnect_delay
        self.connect_timeout = connect_timeout

        self.state = ConnectionState.DISCONNECTED
        self.transport: Transport | None = None
        self.server_token: str | None = None
        self.connect_attempts = 0
        self.sessions = 0

        self._mailbox: asyncio.Queue[Event] = asyncio.Queue()
        self._connect_task: asyncio.Task[None] | None = None
        self._running = False

        self.framer = LineFramer()
        self.router = MessageRouter(self.config.nickname, store)
        self.connect_timer = DebouncedTimer("connect", self._post_timer)
        self.keepalive = KeepaliveScheduler(
            DebouncedTimer("keepalive", self._post_timer),
            self._transmit,
            lambda: self.server_token,
            keepalive_interval,
        )
        self.sender = RateLimitedSender(
            get_bucket(self.config.bucket_key, rate_window, rate_permits),
            self._transmit,
            DebouncedTimer("pacing", self._post_timer),
            self.keepalive,
            pacing_interval,
        )

    @property
    def nickname(self) -> str:
        return self.config.nickname

    @property
    def running(self) -> bool:
        return self._running

    def _set_state(self, new_state: ConnectionState) -> None:
        if self.state != new_state:
            logger.log_event(
                "irc",
                "state_change",
                level=logging.DEBUG,
                user=self.nickname,
                old_state=self.state.name,
                new_state=new_state.name,
            )
            self.state = new_state

    # ------------------------------------------------------------------ #
    # Mailbox
    # ------------------------------------------------------------------ #
    def _post_timer(self, timer: DebouncedTimer, generation: int) -> None:
        self._mailbox.put_nowait(TimerFired(timer, generation))

    def _deliver(self, transport: Transport, data: bytes, error: BaseException | None) -> None:
        self._mailbox.put_nowait(Inbound(transport, data, error))

    def stop(self, reason: str = "stop requested") -> None:
        self._mailbox.put_nowait(Stop(reason))

    async def run(self) -> None:
        if self._running:
            raise RuntimeError("connection actor is already running")
        self._running = True
        self.connect_timer.reschedule(0)
        try:
            while True:
                event = await self._mailbox.get()
                if isinstance(event, Stop):
                    logger.log_event("irc", "stopped", user=self.nickname, reason=event.reason)
                    return
                try:
                    await self._handle(event)
                except NetworkError as e:
                    self._disconnect(str(e))
        finally:
            self._teardown()
            self._running = False

    async def _handle(self, event: Event) -> None:
        if isinstance(event, TimerFired):
            if not event.timer.claim(event.generation):
                return
            if event.timer is self.connect_timer:
                self._start_connect()
            elif event.timer is self.sender.pacing_timer:
                self.sender.on_tick()
            elif event.timer is self.keepalive.timer:
                self.keepalive.fire()
        elif isinstance(event, ConnectDone):
            self._on_connect_done(event)
        elif isinstance(event, Inbound):
            await self._on_inbound(event)

    # ------------------------------------------------------------------ #
    # Connection lifecycle
    # ------------------------------------------------------------------ #
    def _start_connect(self) -> None:
        self._set_state(ConnectionState.CONNECTING)
        self.connect_attempts += 1
        logger.log_event(
            "irc",
            "connect_start",
            user=self.nickname,
            server=self.config.server,
            port=self.config.port,
            ssl=self.config.ssl,
        )
        self._connect_task = asyncio.create_task(self._attempt_connect())

    async def _attempt_connect(self) -> None:
        cfg = self.config
        try:
            transport = await asyncio.wait_for(
                self.connector(cfg.server, cfg.port, cfg.ssl, self._deliver),
                timeout=self.connect_timeout,
            )
        except Exception as e:  # noqa: BLE001 - classified by _on_connect_done
            self._mailbox.put_nowait(ConnectDone(None, e))
            return
        self._mailbox.put_nowait(ConnectDone(transport))

    def _on_connect_done(self, event: ConnectDone) -> None:
        self._connect_task = None
        if event.transport is None:
            error = event.error
            if not isinstance(error, NetworkError | OSError | TimeoutError):
                raise error
            self._set_state(ConnectionState.DISCONNECTED)
            logger.log_event(
                "irc",
                "connect_failed",
                level=logging.WARNING,
                user=self.nickname,
                retry_in=self.reconnect_delay,
                error=str(error) or type(error).__name__,
            )
            self.connect_timer.reschedule(self.reconnect_delay)
            return

        self.transport = event.transport
        self.sessions += 1
        self.framer.reset()
        logger.log_event(
            "irc",
            "connect_success",
            user=self.nickname,
            server=self.config.server,
            port=self.config.port,
        )
        self._register()
        self.transport.rearm()

    def _register(self) -> None:
        self._set_state(ConnectionState.REGISTERING)
        nick = self.nickname
        logger.log_event(
            "irc",
            "register",
            user=nick,
            nickname=nick,
            channel_count=len(self.config.channels),
        )
        self.sender.enqueue(f"USER {nick} * * :{nick}")
        self.sender.enqueue(f"NICK {nick}")
        for channel in self.config.channels:
            self.sender.enqueue(f"JOIN {channel}")
        self._set_state(ConnectionState.ACTIVE)

    def _disconnect(self, reason: str) -> None:
        """Drop the session and schedule the next connect attempt."""
        self._close_session()
        self._set_state(ConnectionState.DISCONNECTED)
        logger.log_event(
            "irc", "disconnected", level=logging.WARNING, user=self.nickname, reason=reason
        )
        self.connect_timer.reschedule(self.reconnect_delay)

    def _close_session(self) -> None:
        if self.transport is not None:
            self.transport.close()
            self.transport = None
        dropped = self.sender.clear()
        if dropped:
            logger.log_event(
                "irc", "queue_discarded", level=logging.DEBUG, user=self.nickname, count=dropped
            )
        self.keepalive.cancel()
        self.framer.reset()

    def _teardown(self) -> None:
        self.connect_timer.cancel()
        if self._connect_task is not None and not self._connect_task.done():
            self._connect_task.cancel()
        self._connect_task = None
        self._close_session()
        while not self._mailbox.empty():
            pending = self._mailbox.get_nowait()
            if isinstance(pending, ConnectDone) and pending.transport is not None:
                pending.transport.close()
        self._set_state(ConnectionState.DISCONNECTED)

    # ------------------------------------------------------------------ #
    # Inbound traffic
    # ------------------------------------------------------------------ #
    async def _on_inbound(self, event: Inbound) -> None:
        if event.transport is not self.transport:
            return  # late delivery from a closed session
        if event.error is not None:
            raise NetworkError(str(event.error)) from event.error
        if not event.data:
            raise NetworkError("connection closed by peer")
        for line in self.framer.feed(event.data):
            await self._handle_line(line)
        self.transport.rearm()

    async def _handle_line(self, line: str) -> None:
        frame = parse_frame(line)
        if frame.origin:
            self.server_token = frame.origin

        kind = frame.kind
        if kind is FrameKind.PING:
            logger.log_event(
                "irc", "ping_received", level=logging.DEBUG, user=self.nickname, token=frame.ping_token
            )
            # Replies to the server's probe skip the queue
            self._transmit(f"PONG {frame.ping_token}".rstrip())
        elif kind is FrameKind.PONG or kind is FrameKind.EMPTY:
            return
        elif kind is FrameKind.PRIVMSG:
            for reply in await self.router.handle_privmsg(frame):
                self.sender.enqueue(reply)
        elif kind is FrameKind.ERROR:
            logger.log_event(
                "irc", "server_error", level=logging.WARNING, user=self.nickname, raw=frame.raw
            )
        else:
            logger.log_event(
                "irc", "unhandled", level=logging.DEBUG, user=self.nickname, raw=frame.raw
            )

    def _transmit(self, line: str) -> None:
        if self.transport is None:
            raise NetworkError("not connected")
        self.transport.send(line)

    def snapshot(self) -> dict[str, object]:
        return {
            "state": self.state.name,
            "server_token": self.server_token,
            "queued": len(self.sender),
            "sender": self.sender.state,
            "keepalive_pending": self.keepalive.pending,
            "connect_pending": self.connect_timer.pending,
            "connect_attempts": self.connect_attempts,
            "sessions": self.sessions,
            "bucket": self.sender.bucket.snapshot(),
        }
