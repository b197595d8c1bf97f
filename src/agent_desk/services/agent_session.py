"""Session-scoped context tying the ledger, break policy and publisher together.

An `AgentSession` is built at login and torn down at logout. It replaces
ambient module state: everything the time accounting needs for one agent and
one day hangs off this object.

Typical use from a front end::

    session = await AgentSession.login(identity, store, LocalDayStateCache())
    session.on_change(render)
    session.on_notice(show_banner)
    try:
        session.change_status(AgentStatus.BREAK)
    except InvalidTransition as exc:
        revert_selector(exc.current)
    ...
    await session.logout()
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from agent_desk.core.clock import Clock
from agent_desk.core.settings import settings
from agent_desk.services.break_policy import BreakPolicy
from agent_desk.services.day_state import AgentIdentity, AgentStatus, DayState
from agent_desk.services.ledger import (
    DayTimeLedger,
    LiveUsage,
    break_remaining,
    compute_worked_minutes,
)
from agent_desk.services.local_cache import LocalDayStateCache
from agent_desk.services.presence import PresencePublisher
from agent_desk.services.recovery import RecoverySource, SessionRecoveryManager
from agent_desk.services.snapshot_store import SnapshotStore
from agent_desk.services.ticker import RepeatingTask

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeskView:
    """Everything the status panel renders, as of one instant."""

    status: AgentStatus
    label: str
    live: LiveUsage
    worked_minutes: float
    work_target: float
    break_limit: float
    break_remaining: float
    can_take_break: bool


ChangeListener = Callable[[DeskView], None]
NoticeListener = Callable[[str], None]


def build_view(ledger: DayTimeLedger, now: datetime, work_target: float | None = None) -> DeskView:
    """Derive the status panel view-model from a ledger at `now`."""
    live = ledger.compute_live_usage(now)
    return DeskView(
        status=ledger.status,
        label=ledger.status.label,
        live=live,
        worked_minutes=compute_worked_minutes(live),
        work_target=settings.work_target_min if work_target is None else work_target,
        break_limit=ledger.break_limit,
        break_remaining=break_remaining(live, ledger.break_limit),
        can_take_break=ledger.can_enter_break(now),
    )


class AgentSession:
    """One agent's live time-accounting session."""

    def __init__(
        self,
        identity: AgentIdentity,
        state: DayState,
        *,
        publisher: PresencePublisher,
        cache: LocalDayStateCache,
        clock: Clock | None = None,
        tick_interval: float | None = None,
        break_limit: float | None = None,
        source: RecoverySource = "fresh",
    ) -> None:
        self.identity = identity
        self.clock = clock or Clock()
        self.ledger = DayTimeLedger(state, break_limit=break_limit)
        self.publisher = publisher
        self.cache = cache
        self.source = source
        self.policy = BreakPolicy(notify=self._emit_notice)
        self._change_listeners: list[ChangeListener] = []
        self._notice_listeners: list[NoticeListener] = []
        self._ticker = RepeatingTask(
            tick_interval if tick_interval is not None else settings.tick_interval_seconds,
            self.tick,
            name=f"ledger-tick-{identity.user_id}",
        )
        self._closed = False

    @classmethod
    async def login(
        cls,
        identity: AgentIdentity,
        store: SnapshotStore,
        cache: LocalDayStateCache,
        *,
        clock: Clock | None = None,
        tick_interval: float | None = None,
        break_limit: float | None = None,
    ) -> AgentSession:
        """Recover today's state, persist it and start ticking."""
        clock = clock or Clock()
        publisher = PresencePublisher(store)
        recovery = SessionRecoveryManager(store, cache, clock=clock, publisher=publisher)
        recovered = await recovery.resume(identity)
        session = cls(
            identity,
            recovered.state,
            publisher=publisher,
            cache=cache,
            clock=clock,
            tick_interval=tick_interval,
            break_limit=break_limit,
            source=recovered.source,
        )
        session._ticker.start()
        return session

    @property
    def state(self) -> DayState:
        return self.ledger.state

    @property
    def ticking(self) -> bool:
        return self._ticker.running

    @property
    def closed(self) -> bool:
        return self._closed

    def on_change(self, listener: ChangeListener) -> Callable[[], None]:
        """Subscribe to view updates; returns an unsubscribe callable."""
        self._change_listeners.append(listener)
        return lambda: self._detach(self._change_listeners, listener)

    def on_notice(self, listener: NoticeListener) -> Callable[[], None]:
        """Subscribe to user-facing notices such as the break limit."""
        self._notice_listeners.append(listener)
        return lambda: self._detach(self._notice_listeners, listener)

    @staticmethod
    def _detach(listeners: list, listener: object) -> None:
        if listener in listeners:
            listeners.remove(listener)

    def _emit_notice(self, message: str) -> None:
        for listener in list(self._notice_listeners):
            listener(message)

    def _emit_change(self, now: datetime) -> DeskView:
        view = build_view(self.ledger, now)
        for listener in list(self._change_listeners):
            listener(view)
        return view

    def view(self, now: datetime | None = None) -> DeskView:
        return build_view(self.ledger, now if now is not None else self.clock.now())

    def _persist(self, now: datetime) -> None:
        record = self.ledger.snapshot(now, self.identity)
        self.cache.save(record)
        self.publisher.flush(record)

    def _local_midnight(self, day: str) -> datetime:
        return datetime.combine(date.fromisoformat(day), time(), tzinfo=self.clock.tz)

    def _roll_over_day(self, now: datetime) -> bool:
        """Close the previous day at local midnight and continue in a fresh state.

        The current status carries over; every counter, including the break
        budget, restarts at zero. Returns True when a new day was started.
        """
        today = self.clock.today_key(now)
        previous = self.state
        if today <= previous.day:
            return False

        day_end = self._local_midnight(previous.day) + timedelta(days=1)
        final = self.ledger.snapshot(day_end, self.identity)
        self.publisher.flush(final)

        state = DayState.fresh(previous.user_id, today, self._local_midnight(today))
        state.status = previous.status
        self.ledger = DayTimeLedger(
            state,
            break_limit=self.ledger.break_limit,
            epsilon=self.ledger.epsilon,
        )
        logger.info("%s rolled over from %s to %s", self.identity.user_id, previous.day, today)
        return True

    def change_status(self, status: AgentStatus | str, now: datetime | None = None) -> DeskView:
        """Apply an agent-initiated status change and flush it.

        Raises:
            InvalidTransition: When entering break with no budget left. State is
                unchanged and no flush happens.
        """
        if self._closed:
            raise RuntimeError("Session has been logged out")
        now = now if now is not None else self.clock.now()
        self._roll_over_day(now)
        previous = self.ledger.transition_to(status, now)
        logger.info(
            "%s changed status %s -> %s",
            self.identity.user_id,
            previous.value,
            self.ledger.status.value,
        )
        self._persist(now)
        return self._emit_change(now)

    def tick(self, now: datetime | None = None) -> DeskView:
        """One periodic pass: recompute, enforce the break ceiling, render, flush."""
        now = now if now is not None else self.clock.now()
        self._roll_over_day(now)
        self.policy.enforce_on_tick(self.ledger, now)
        view = self._emit_change(now)
        self._persist(now)
        return view

    async def logout(self, now: datetime | None = None) -> None:
        """Stop the tick, mark the agent unavailable and push a final snapshot."""
        if self._closed:
            return
        self._closed = True
        await self._ticker.stop()

        now = now if now is not None else self.clock.now()
        self._roll_over_day(now)
        self.ledger.transition_to(AgentStatus.UNAVAILABLE, now)
        record = self.ledger.snapshot(now, self.identity)
        self.cache.save(record)
        await self.publisher.drain()
        await self.publisher.push(record)

        self._change_listeners.clear()
        self._notice_listeners.clear()
        logger.info("%s logged out", self.identity.user_id)
