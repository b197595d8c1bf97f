"""Supervisor-side aggregation of agent snapshots."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from agent_desk.core.clock import Clock
from agent_desk.core.settings import settings
from agent_desk.schemas.snapshot import (
    AgentLiveSummary,
    DaySnapshotRecord,
    PresenceEntry,
    StatusCounts,
)
from agent_desk.services.day_state import AgentStatus, DayState, presence_tier
from agent_desk.services.errors import PersistenceUnavailable
from agent_desk.services.ledger import (
    DayTimeLedger,
    break_remaining,
    compute_worked_minutes,
)
from agent_desk.services.snapshot_store import SnapshotStore
from agent_desk.services.ticker import RepeatingTask

logger = logging.getLogger(__name__)

BoardListener = Callable[[StatusCounts], None]


def count_statuses(day: str, records: Iterable[DaySnapshotRecord]) -> StatusCounts:
    """Count agents per status; missing or unknown statuses count as unavailable."""
    counts = {status: 0 for status in AgentStatus}
    total = 0
    for record in records:
        counts[AgentStatus.parse(record.status)] += 1
        total += 1
    return StatusCounts(
        day=day,
        operating=counts[AgentStatus.OPERATING],
        break_=counts[AgentStatus.BREAK],
        meeting=counts[AgentStatus.MEETING],
        handling=counts[AgentStatus.HANDLING],
        unavailable=counts[AgentStatus.UNAVAILABLE],
        total=total,
    )


def presence_entries(records: Iterable[DaySnapshotRecord]) -> list[PresenceEntry]:
    """Return the presence dot of every agent in `records`."""
    entries = []
    for record in records:
        status = AgentStatus.parse(record.status)
        entries.append(
            PresenceEntry(
                user_id=record.user_id,
                name=record.name,
                status=status.value,
                tier=presence_tier(status).value,
            )
        )
    return entries


def live_summary(
    record: DaySnapshotRecord,
    now: datetime,
    *,
    break_limit: float | None = None,
    accrue: bool = True,
) -> AgentLiveSummary:
    """Recompute an agent's live minutes from its last snapshot as of `now`.

    With `accrue=False` (a closed day) the figures are the flushed ones.
    """
    limit = settings.break_limit_min if break_limit is None else break_limit
    ledger = DayTimeLedger(DayState.from_record(record, tz=now.tzinfo or UTC), break_limit=limit)
    live = ledger.compute_live_usage(now if accrue else ledger.state.last_status_change_at)
    status = ledger.status
    return AgentLiveSummary(
        user_id=record.user_id,
        name=record.name,
        role=record.role,
        status=status.value,
        label=status.label,
        break_used=live.break_used,
        operating=live.operating,
        meeting=live.meeting,
        handling=live.handling,
        unavailable=live.unavailable,
        worked_minutes=compute_worked_minutes(live),
        break_remaining=break_remaining(live, limit),
    )


class StatusBoardWatcher:
    """Polls today's snapshots and pushes fresh status counts to listeners.

    The data is eventually consistent: an agent's change shows up after their
    next flush and this watcher's next poll.
    """

    def __init__(
        self,
        store: SnapshotStore,
        clock: Clock | None = None,
        interval: float | None = None,
    ) -> None:
        self.store = store
        self.clock = clock or Clock()
        self.latest: StatusCounts | None = None
        self._listeners: list[BoardListener] = []
        self._task = RepeatingTask(
            interval if interval is not None else settings.board_refresh_seconds,
            self.refresh,
            name="status-board",
        )

    def subscribe(self, listener: BoardListener) -> Callable[[], None]:
        """Register `listener`; returns a callable that detaches it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def refresh(self) -> StatusCounts | None:
        """Fetch today's snapshots once and notify listeners."""
        today = self.clock.today_key()
        try:
            records = await self.store.list_for_day(today)
        except PersistenceUnavailable as exc:
            logger.warning("Status board refresh failed; keeping last counts: %s", exc)
            return self.latest

        self.latest = count_statuses(today, records)
        for listener in list(self._listeners):
            listener(self.latest)
        return self.latest

    async def start(self) -> None:
        await self.refresh()
        self._task.start()

    async def stop(self) -> None:
        """Stop polling and detach every listener."""
        await self._task.stop()
        self._listeners.clear()
