"""Picks the authoritative day state when an agent logs in or reloads.

Priority order:

1. A same-device cached state for this agent and today, resumed unchanged so a
   reload is not treated as a gap.
2. The remote snapshot for `(today, user_id)`, with the accrual point moved to
   `now`. Time spent away from any device is not credited to any bucket.
3. A fresh state (all counters zero, operating).

A failing remote store never blocks login; recovery falls through to a fresh
state and logs the problem.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from agent_desk.core.clock import Clock
from agent_desk.services.day_state import AgentIdentity, DayState
from agent_desk.services.errors import PersistenceUnavailable, StaleDayState
from agent_desk.services.local_cache import LocalDayStateCache
from agent_desk.services.presence import PresencePublisher
from agent_desk.services.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)

RecoverySource = Literal["cache", "remote", "fresh"]


@dataclass(frozen=True)
class RecoveredState:
    """Outcome of a recovery: the state to resume and where it came from."""

    state: DayState
    source: RecoverySource


class SessionRecoveryManager:
    """Reconciles the device cache and the remote snapshot for today."""

    def __init__(
        self,
        store: SnapshotStore,
        cache: LocalDayStateCache,
        clock: Clock | None = None,
        publisher: PresencePublisher | None = None,
    ) -> None:
        self.store = store
        self.cache = cache
        self.clock = clock or Clock()
        self.publisher = publisher or PresencePublisher(store)

    def _from_cache(self, identity: AgentIdentity, today: str) -> DayState | None:
        record = self.cache.load()
        if record is None:
            return None
        state = DayState.from_record(record, tz=self.clock.tz)
        try:
            state.ensure_current(identity.user_id, today)
        except StaleDayState as exc:
            logger.info("Ignoring cached day state: %s", exc)
            return None
        return state

    async def _from_remote(
        self, identity: AgentIdentity, today: str, now: datetime
    ) -> DayState | None:
        try:
            record = await self.store.fetch(today, identity.user_id)
        except PersistenceUnavailable as exc:
            logger.warning(
                "Snapshot store unavailable while recovering %s; starting fresh: %s",
                identity.user_id,
                exc,
            )
            return None
        if record is None:
            return None
        state = DayState.from_record(record, resume_at=now, tz=self.clock.tz)
        try:
            state.ensure_current(identity.user_id, today)
        except StaleDayState as exc:
            logger.info("Ignoring remote day state: %s", exc)
            return None
        return state

    async def resolve(self, identity: AgentIdentity, now: datetime) -> RecoveredState:
        """Pick the starting state without persisting it."""
        today = self.clock.today_key(now)

        state = self._from_cache(identity, today)
        if state is not None:
            return RecoveredState(state, "cache")

        state = await self._from_remote(identity, today, now)
        if state is not None:
            return RecoveredState(state, "remote")

        return RecoveredState(DayState.fresh(identity.user_id, today, now), "fresh")

    async def resume(self, identity: AgentIdentity, now: datetime | None = None) -> RecoveredState:
        """Resolve today's state, then write it to the cache and the remote store."""
        if now is None:
            now = self.clock.now()
        recovered = await self.resolve(identity, now)
        logger.info(
            "Resumed %s for %s from %s (status=%s)",
            recovered.state.day,
            identity.user_id,
            recovered.source,
            recovered.state.status.value,
        )

        record = recovered.state.to_record(identity)
        self.cache.save(record)
        await self.publisher.push(record)
        return recovered
