"""Persistent karma counters."""

from .model import KarmaRecord, normalize_key
from .store import KarmaStore

__all__ = ["KarmaRecord", "KarmaStore", "normalize_key"]
