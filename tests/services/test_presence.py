# mypy: ignore-errors
# tests/services/test_presence.py
"""Tests for the best-effort snapshot publisher."""

import asyncio

import pytest

from agent_desk.services.presence import PresencePublisher
from tests.conftest import TODAY, InMemorySnapshotStore, make_record


@pytest.mark.asyncio
async def test_push_writes_record(store) -> None:
    publisher = PresencePublisher(store)
    record = make_record()

    assert await publisher.push(record) is True
    assert store.records[record.doc_id] == record
    assert publisher.failures == 0


@pytest.mark.asyncio
async def test_push_failure_is_counted_not_raised(store, caplog) -> None:
    store.fail_writes = True
    publisher = PresencePublisher(store)

    assert await publisher.push(make_record()) is False
    assert publisher.failures == 1
    assert "Deferring snapshot" in caplog.text


@pytest.mark.asyncio
async def test_flush_runs_in_background_and_drain_waits(store) -> None:
    publisher = PresencePublisher(store)
    first = make_record(operation_minutes=1.0)
    second = make_record(operation_minutes=2.0)

    publisher.flush(first)
    publisher.flush(second)
    await publisher.drain()

    assert [r.operation_minutes for r in store.saved] == [1.0, 2.0]
    assert store.records[first.doc_id].operation_minutes == 2.0


@pytest.mark.asyncio
async def test_failed_flush_is_superseded_by_next_one(store) -> None:
    """Nothing is retried; the next flush carries the newer snapshot."""
    publisher = PresencePublisher(store)
    store.fail_writes = True
    publisher.flush(make_record(operation_minutes=1.0))
    await publisher.drain()

    store.fail_writes = False
    publisher.flush(make_record(operation_minutes=3.0))
    await publisher.drain()

    assert publisher.failures == 1
    assert [r.operation_minutes for r in store.saved] == [3.0]


@pytest.mark.asyncio
async def test_drain_with_nothing_pending(store) -> None:
    await PresencePublisher(store).drain()


@pytest.mark.asyncio
async def test_unexpected_flush_error_is_logged(store, mocker, caplog) -> None:
    """A crash inside a background flush is reported, not lost."""
    save = mocker.patch.object(store, "save", side_effect=RuntimeError("boom"))
    publisher = PresencePublisher(store)

    publisher.flush(make_record())
    await publisher.drain()

    save.assert_awaited_once()
    assert "Snapshot flush crashed" in caplog.text
    assert publisher.failures == 0


class SlowFirstWriteStore(InMemorySnapshotStore):
    """Store whose first write takes longer than the ones after it."""

    def __init__(self) -> None:
        super().__init__()
        self.delays = [0.05]

    async def save(self, record) -> None:
        if self.delays:
            await asyncio.sleep(self.delays.pop(0))
        await super().save(record)


@pytest.mark.asyncio
async def test_back_to_back_flushes_land_in_order() -> None:
    """A slow earlier write never overwrites a later snapshot."""
    store = SlowFirstWriteStore()
    publisher = PresencePublisher(store)

    publisher.flush(make_record(status="operating", operation_minutes=1.0))
    publisher.flush(make_record(status="meeting", operation_minutes=2.0))
    await publisher.drain()

    assert [r.status for r in store.saved] == ["operating", "meeting"]
    assert store.records[f"{TODAY}_agent01"].status == "meeting"
