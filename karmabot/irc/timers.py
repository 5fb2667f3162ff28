"""Single-slot debounced timers for the connection actor."""

from __future__ import annotations

import asyncio
from collections.abc import Callable


class DebouncedTimer:
    """A timer with at most one pending firing.

    ``reschedule`` always cancels the previous firing first. Firings are
    handed to ``on_fire`` together with a generation number; the receiver
    must ``claim`` it before acting, which rejects firings that were
    superseded while they sat in a queue.
    """

    def __init__(
        self,
        name: str,
        on_fire: Callable[[DebouncedTimer, int], None],
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.name = name
        self._on_fire = on_fire
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._generation = 0
        self.delay: float | None = None

    def __repr__(self) -> str:
        return f"DebouncedTimer({self.name!r}, pending={self.pending}, delay={self.delay})"

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def reschedule(self, delay: float) -> int:
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        generation = self._generation
        self.delay = delay
        self._handle = loop.call_later(max(0.0, delay), self._fire, generation)
        return generation

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        # Invalidates a firing that was already handed out but not claimed
        self._generation += 1

    def claim(self, generation: int) -> bool:
        """Accept a delivered firing once; False if it is stale or already claimed."""
        if generation != self._generation or self._handle is not None:
            return False
        self._generation += 1
        return True

    def _fire(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._handle = None
        self._on_fire(self, generation)
