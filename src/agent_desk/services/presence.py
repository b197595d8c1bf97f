"""Publishes an agent's day snapshot to the remote store."""

from __future__ import annotations

import asyncio
import logging

from agent_desk.schemas.snapshot import DaySnapshotRecord
from agent_desk.services.errors import PersistenceUnavailable
from agent_desk.services.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


class PresencePublisher:
    """Best-effort writer of snapshots.

    Failed writes are not queued for retry: the next periodic flush carries a
    newer snapshot and supersedes the one that failed. Writes go out one at a
    time in the order they were scheduled, so the last flush is the one the
    store keeps.
    """

    def __init__(self, store: SnapshotStore) -> None:
        self.store = store
        self._pending: set[asyncio.Task[bool]] = set()
        self._write_lock = asyncio.Lock()
        self.failures = 0

    async def push(self, record: DaySnapshotRecord) -> bool:
        """Write `record` now. Returns False if the store was unavailable."""
        async with self._write_lock:
            try:
                await self.store.save(record)
            except PersistenceUnavailable as exc:
                self.failures += 1
                logger.warning("Deferring snapshot %s to next flush: %s", record.doc_id, exc)
                return False
        return True

    def flush(self, record: DaySnapshotRecord) -> asyncio.Task[bool]:
        """Schedule a write of `record` without waiting for it."""
        task = asyncio.create_task(self.push(record), name=f"flush-{record.doc_id}")
        self._pending.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[bool]) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Snapshot flush crashed", exc_info=task.exception())

    async def drain(self) -> None:
        """Wait for every scheduled write to complete."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
