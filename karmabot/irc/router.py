"""Application message handling: karma updates and ping replies."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Protocol

from ..errors.internal import KarmaError
from ..karma.model import KarmaRecord
from ..logs.logger import logger
from .framer import Frame

INCREMENT = "++"
DECREMENT = "--"


class CounterStore(Protocol):
    async def increment(self, what: str) -> KarmaRecord: ...  # noqa: E704

    async def decrement(self, what: str) -> KarmaRecord: ...  # noqa: E704


def privmsg(target: str, text: str) -> str:
    return f"PRIVMSG {target} :{text}"


def scan_karma(text: str) -> Iterator[tuple[str, str]]:
    """Yield ``(key, op)`` for every whitespace separated word ending in ``++``/``--``.

    Keys are lowercased; ``op`` is the literal suffix. Matches come out in
    left-to-right order. A bare ``++`` or ``--`` has no key and is skipped.
    """
    for word in text.split():
        key, op = word[:-2], word[-2:]
        if key and op in (INCREMENT, DECREMENT):
            yield key.lower(), op


def is_ping_request(text: str) -> bool:
    return text.lower().startswith("ping")


class MessageRouter:
    """Turns inbound PRIVMSG frames into outbound reply lines."""

    def __init__(self, nickname: str, store: CounterStore) -> None:
        self.nickname = nickname
        self.store = store

    def is_private(self, target: str) -> bool:
        return target.lower() == self.nickname.lower()

    async def handle_privmsg(self, frame: Frame) -> list[str]:
        author = frame.nick or ""
        target = frame.target or ""
        text = frame.text or ""
        private = self.is_private(target)
        reply_to = author if private else target

        logger.log_event(
            "chat",
            "privmsg",
            level=logging.DEBUG,
            channel=None if private else target,
            author=author,
            text=text,
        )

        lines = [await self._apply_karma(reply_to, what, op) for what, op in scan_karma(text)]
        if is_ping_request(text):
            lines.append(privmsg(reply_to, "pong" if private else f"{author}: pong"))
            logger.log_event("chat", "pong", level=logging.DEBUG, author=author)
        return lines

    async def _apply_karma(self, reply_to: str, what: str, op: str) -> str:
        update = self.store.increment if op == INCREMENT else self.store.decrement
        try:
            record = await update(what)
        except KarmaError as e:
            logger.log_event(
                "chat", "karma_failed", level=logging.WARNING, what=what, error=str(e)
            )
            return privmsg(reply_to, f"Failed to register {what}, sorry about that :(")
        logger.log_event("chat", "karma_updated", what=record.what, score=record.score)
        return privmsg(reply_to, f"{record.what} has now {record.score} point(s)")
