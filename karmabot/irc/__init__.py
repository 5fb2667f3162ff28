"""IRC subsystem package.

Contains the transport, line framing, rate limited sender, keepalive
scheduler, message router and the connection actor tying them together.
"""

from .connection import IRCBot  # noqa: F401
from .framer import Frame, LineFramer, parse_frame  # noqa: F401
from .keepalive import KeepaliveScheduler  # noqa: F401
from .models import ConnectionState, FrameKind  # noqa: F401
from .router import MessageRouter, privmsg, scan_karma  # noqa: F401
from .sender import RateLimitedSender  # noqa: F401
from .timers import DebouncedTimer  # noqa: F401
from .transport import Transport, open_transport  # noqa: F401

__all__ = [
    "ConnectionState",
    "DebouncedTimer",
    "Frame",
    "FrameKind",
    "IRCBot",
    "KeepaliveScheduler",
    "LineFramer",
    "MessageRouter",
    "RateLimitedSender",
    "Transport",
    "open_transport",
    "parse_frame",
    "privmsg",
    "scan_karma",
]
