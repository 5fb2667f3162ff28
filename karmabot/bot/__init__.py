"""Process-level supervision of the connection actor."""

from .signal_handler import SignalHandler
from .supervisor import BotSupervisor

__all__ = ["BotSupervisor", "SignalHandler"]
