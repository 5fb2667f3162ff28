from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(UTC)


class KarmaRecord(BaseModel):
    """Score of one karma key.

    Attributes:
        what: Lowercased key; must not be empty.
        score: Current score (may be negative).
        inserted_at: When the key was first seen.
        updated_at: When the score last changed.
    """

    what: str = Field(min_length=1)
    score: int = 0
    inserted_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


def normalize_key(what: str) -> str:
    return what.strip().lower()
