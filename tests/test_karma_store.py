import asyncio
import json
from unittest.mock import patch

import pytest

from karmabot.errors.internal import KarmaError
from karmabot.karma.store import KarmaStore


@pytest.mark.asyncio
async def test_new_key_starts_at_plus_or_minus_one(store):
    up = await store.increment("Alpha")
    down = await store.decrement("beta")
    assert (up.what, up.score) == ("alpha", 1)
    assert (down.what, down.score) == ("beta", -1)


@pytest.mark.asyncio
async def test_updates_accumulate_and_touch_updated_at(store):
    first = await store.increment("x")
    second = await store.increment("x")
    third = await store.decrement("X")
    assert [first.score, second.score, third.score] == [1, 2, 1]
    assert third.inserted_at == first.inserted_at
    assert third.updated_at >= first.updated_at


@pytest.mark.asyncio
async def test_scores_survive_a_new_instance(tmp_path):
    path = tmp_path / "karma.json"
    await KarmaStore(path).increment("persisted")
    await KarmaStore(path).increment("persisted")
    record = await KarmaStore(path).get("persisted")
    assert record is not None and record.score == 2


@pytest.mark.asyncio
async def test_file_layout_is_sorted(tmp_path):
    path = tmp_path / "karma.json"
    store = KarmaStore(path)
    await store.increment("zeta")
    await store.increment("alpha")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert [entry["what"] for entry in data["karma"]] == ["alpha", "zeta"]


@pytest.mark.asyncio
async def test_empty_key_is_rejected_without_writing(tmp_path):
    path = tmp_path / "karma.json"
    store = KarmaStore(path)
    with pytest.raises(KarmaError):
        await store.increment("   ")
    assert not path.exists()
    assert await store.get("") is None


@pytest.mark.asyncio
async def test_write_failure_rolls_back(tmp_path):
    store = KarmaStore(tmp_path / "karma.json", write_attempts=2)
    await store.increment("kept")
    with patch.object(store, "_write_file", side_effect=OSError("disk full")) as write:
        with pytest.raises(KarmaError):
            await store.increment("kept")
        with pytest.raises(KarmaError):
            await store.increment("fresh")
    assert write.call_count == 4
    assert (await store.get("kept")).score == 1
    assert await store.get("fresh") is None


@pytest.mark.asyncio
async def test_transient_write_failure_is_retried(tmp_path):
    store = KarmaStore(tmp_path / "karma.json", write_attempts=3)
    real_write = store._write_file
    calls = []

    def flaky(payload):
        calls.append(payload)
        if len(calls) == 1:
            raise OSError("temporarily unavailable")
        real_write(payload)

    with patch.object(store, "_write_file", side_effect=flaky):
        record = await store.increment("retry")
    assert record.score == 1
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_corrupt_file_raises_karma_error(tmp_path):
    path = tmp_path / "karma.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(KarmaError):
        await KarmaStore(path).increment("x")


@pytest.mark.asyncio
async def test_invalid_entries_are_skipped(tmp_path):
    path = tmp_path / "karma.json"
    path.write_text(
        json.dumps({"karma": [{"what": "", "score": 3}, {"what": "good", "score": 5}]}),
        encoding="utf-8",
    )
    store = KarmaStore(path)
    assert (await store.get("good")).score == 5
    assert await store.get("") is None


@pytest.mark.asyncio
async def test_concurrent_increments_do_not_lose_updates(store):
    await asyncio.gather(*(store.increment("busy") for _ in range(20)))
    assert (await store.get("busy")).score == 20
