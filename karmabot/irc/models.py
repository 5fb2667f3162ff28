"""Shared IRC data models: connection states and actor mailbox events."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .timers import DebouncedTimer
    from .transport import Transport


class ConnectionState(Enum):
    DISCONNECTED = auto()
    CONNECTING = auto()
    REGISTERING = auto()
    ACTIVE = auto()


class FrameKind(Enum):
    EMPTY = auto()
    PING = auto()
    PONG = auto()
    PRIVMSG = auto()
    ERROR = auto()
    OTHER = auto()


@dataclass(slots=True)
class TimerFired:
    timer: DebouncedTimer
    generation: int


@dataclass(slots=True)
class ConnectDone:
    transport: Transport | None
    error: BaseException | None = None


@dataclass(slots=True)
class Inbound:
    transport: Transport
    data: bytes
    error: BaseException | None = None


@dataclass(slots=True)
class Stop:
    reason: str = "stop requested"
