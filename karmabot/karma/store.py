"""JSON file backed karma counter store.

All updates go through one ``asyncio.Lock`` so concurrent increments of the
same key never lose a step. The file is rewritten atomically (temporary file
plus ``os.replace``) in the default executor, with Tenacity retrying transient
``OSError`` failures.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..constants import KARMA_WRITE_ATTEMPTS
from ..errors.internal import KarmaError
from .model import KarmaRecord, normalize_key


class KarmaStore:
    """Key -> score store with atomic increment/decrement."""

    def __init__(
        self, path: str | os.PathLike[str], *, write_attempts: int = KARMA_WRITE_ATTEMPTS
    ) -> None:
        self.path = str(path)
        self.write_attempts = max(1, write_attempts)
        self._records: dict[str, KarmaRecord] | None = None
        self._lock = asyncio.Lock()

    async def increment(self, what: str) -> KarmaRecord:
        return await self._adjust(what, 1)

    async def decrement(self, what: str) -> KarmaRecord:
        return await self._adjust(what, -1)

    async def get(self, what: str) -> KarmaRecord | None:
        async with self._lock:
            records = await self._ensure_loaded()
            return records.get(normalize_key(what))

    async def _adjust(self, what: str, delta: int) -> KarmaRecord:
        key = normalize_key(what)
        async with self._lock:
            records = await self._ensure_loaded()
            previous = records.get(key)
            now = datetime.now(UTC)
            if previous is None:
                try:
                    record = KarmaRecord(what=key, score=delta, inserted_at=now, updated_at=now)
                except ValidationError as e:
                    raise KarmaError(f"invalid karma key {what!r}", what=key) from e
            else:
                record = previous.model_copy(
                    update={"score": previous.score + delta, "updated_at": now}
                )
            records[key] = record
            try:
                await self._persist(records)
            except KarmaError:
                # Keep memory consistent with what is on disk
                if previous is None:
                    records.pop(key, None)
                else:
                    records[key] = previous
                raise
            return record

    async def _ensure_loaded(self) -> dict[str, KarmaRecord]:
        if self._records is None:
            loop = asyncio.get_running_loop()
            self._records = await loop.run_in_executor(None, self._read_file)
        return self._records

    def _read_file(self) -> dict[str, KarmaRecord]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            raise KarmaError(f"karma store unreadable: {e}") from e

        entries = data.get("karma", []) if isinstance(data, dict) else []
        records: dict[str, KarmaRecord] = {}
        for entry in entries:
            try:
                record = KarmaRecord.model_validate(entry)
            except ValidationError as e:
                logging.warning(f"⚠️ Skipping invalid karma entry entry={entry!r} error={e}")
                continue
            records[record.what] = record
        return records

    async def _persist(self, records: dict[str, KarmaRecord]) -> None:
        payload = {
            "karma": [r.model_dump(mode="json") for r in sorted(records.values(), key=lambda r: r.what)]
        }
        loop = asyncio.get_running_loop()
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.write_attempts),
            wait=wait_exponential(multiplier=0.05, max=1),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    await loop.run_in_executor(None, self._write_file, payload)
        except OSError as e:
            raise KarmaError(f"failed to persist karma: {e}") from e

    def _write_file(self, payload: dict[str, Any]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".karma.", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError:
            try:
                os.remove(tmp_path)
            except FileNotFoundError:
                pass
            raise
