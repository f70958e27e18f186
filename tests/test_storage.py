from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

from tx_envelope import InMemoryRecordStorage


def _records(engine, party_id: str, count: int):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [
        replace(
            engine.encrypt_payload(party_id, {"n": i}).record,
            created_at=base + timedelta(minutes=i),
        )
        for i in range(count)
    ]


async def test_save_and_find(memory_storage: InMemoryRecordStorage, engine):
    record = engine.encrypt_payload("party_1", {"a": 1}).record
    await memory_storage.save(record)

    assert await memory_storage.find_by_id(record.id) == record
    assert await memory_storage.find_by_id("tx_" + "0" * 32) is None
    assert await memory_storage.count() == 1


async def test_list_is_newest_first(memory_storage, engine):
    records = _records(engine, "party_1", 3)
    for record in records:
        await memory_storage.save(record)

    listed = await memory_storage.list()
    assert [r.id for r in listed] == [r.id for r in reversed(records)]


async def test_find_by_party_id(memory_storage, engine):
    for record in _records(engine, "party_a", 2) + _records(engine, "party_b", 1):
        await memory_storage.save(record)

    party_a = await memory_storage.find_by_party_id("party_a")
    assert len(party_a) == 2
    assert all(r.party_id == "party_a" for r in party_a)
    assert await memory_storage.find_by_party_id("party_c") == []


async def test_delete_and_clear(memory_storage, engine):
    first, second = _records(engine, "party_1", 2)
    await memory_storage.save(first)
    await memory_storage.save(second)

    assert await memory_storage.delete(first.id) is True
    assert await memory_storage.delete(first.id) is False
    assert await memory_storage.count() == 1

    await memory_storage.clear()
    assert await memory_storage.count() == 0
