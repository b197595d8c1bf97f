"""Live time accounting for a single agent day.

The ledger owns one `DayState` and answers two questions: how many minutes
have accumulated in each status as of a given instant, and how to apply a
status change without losing or double-counting elapsed time.

Stored counters only change on *settle* (a transition or a flush). Between
settles the live figures are derived from `now - last_status_change_at`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from agent_desk.core.settings import settings
from agent_desk.schemas.snapshot import DaySnapshotRecord
from agent_desk.services.day_state import AgentIdentity, AgentStatus, DayState
from agent_desk.services.errors import InvalidTransition

logger = logging.getLogger(__name__)

SECONDS_PER_MINUTE = 60.0


@dataclass(frozen=True)
class LiveUsage:
    """Minute totals per status as of a specific instant. Never stored."""

    break_used: float
    operating: float
    meeting: float
    handling: float
    unavailable: float

    @property
    def total(self) -> float:
        return self.break_used + self.operating + self.meeting + self.handling + self.unavailable

    def for_status(self, status: AgentStatus) -> float:
        """Return the live minutes of one status bucket."""
        return {
            AgentStatus.BREAK: self.break_used,
            AgentStatus.OPERATING: self.operating,
            AgentStatus.MEETING: self.meeting,
            AgentStatus.HANDLING: self.handling,
            AgentStatus.UNAVAILABLE: self.unavailable,
        }[status]


def compute_worked_minutes(live: LiveUsage) -> float:
    """Return worked time: everything except `unavailable` (break counts as worked)."""
    return live.operating + live.meeting + live.handling + live.break_used


def break_remaining(live: LiveUsage, limit: float | None = None) -> float:
    """Return how much break budget is left, never below zero."""
    cap = settings.break_limit_min if limit is None else limit
    return max(0.0, cap - live.break_used)


def format_minutes(minutes: float) -> str:
    """Render minutes the way the dashboard shows them: `42 min` or `2 hrs 5 min`."""
    whole = max(0, int(minutes))
    hours, rest = divmod(whole, 60)
    if hours <= 0:
        return f"{rest} min"
    return f"{hours} hrs {rest} min"


class DayTimeLedger:
    """Accumulates minutes per status for one agent day."""

    def __init__(
        self,
        state: DayState,
        *,
        break_limit: float | None = None,
        epsilon: float | None = None,
    ) -> None:
        self.state = state
        self.break_limit = settings.break_limit_min if break_limit is None else break_limit
        self.epsilon = settings.break_epsilon_min if epsilon is None else epsilon

    @property
    def status(self) -> AgentStatus:
        return self.state.status

    def _elapsed_minutes(self, now: datetime) -> float:
        elapsed = (now - self.state.last_status_change_at).total_seconds() / SECONDS_PER_MINUTE
        if elapsed < 0:
            logger.debug(
                "Clock skew for %s: now is %.3f min before last change; treating as zero",
                self.state.user_id,
                -elapsed,
            )
            return 0.0
        return elapsed

    def compute_live_usage(self, now: datetime) -> LiveUsage:
        """Return live minutes per bucket without touching stored counters."""
        minutes = dict(self.state.minutes_by_status)
        minutes[self.state.status] += self._elapsed_minutes(now)
        return LiveUsage(
            break_used=min(minutes[AgentStatus.BREAK], self.break_limit),
            operating=minutes[AgentStatus.OPERATING],
            meeting=minutes[AgentStatus.MEETING],
            handling=minutes[AgentStatus.HANDLING],
            unavailable=minutes[AgentStatus.UNAVAILABLE],
        )

    def settle_elapsed(self, now: datetime) -> float:
        """Fold elapsed time into the active bucket and move the accrual point to `now`.

        Replaying with the same `now` is a no-op. Returns the minutes credited.
        """
        elapsed = self._elapsed_minutes(now)
        if elapsed <= 0:
            return 0.0

        bucket = self.state.status
        before = self.state.minutes_by_status[bucket]
        after = before + elapsed
        if bucket is AgentStatus.BREAK:
            after = min(after, max(before, self.break_limit))
        self.state.minutes_by_status[bucket] = after
        self.state.last_status_change_at = now
        return after - before

    def can_enter_break(self, now: datetime) -> bool:
        """Return False once the live break usage is within epsilon of the limit."""
        live = self.compute_live_usage(now)
        return live.break_used < self.break_limit - self.epsilon

    def transition_to(self, new_status: AgentStatus | str, now: datetime) -> AgentStatus:
        """Switch to `new_status` after settling elapsed time into the outgoing bucket.

        Raises:
            InvalidTransition: If entering break with the budget exhausted. The
                stored state is left untouched in that case.
        """
        target = AgentStatus(new_status)
        if target is AgentStatus.BREAK and not self.can_enter_break(now):
            raise InvalidTransition(
                self.state.status,
                target,
                f"Break limit of {self.break_limit:g} min already used",
            )

        previous = self.state.status
        self.settle_elapsed(now)
        self.state.status = target
        self.state.last_status_change_at = now
        return previous

    def snapshot(self, now: datetime, identity: AgentIdentity | None = None) -> DaySnapshotRecord:
        """Settle and serialize the state for a flush."""
        self.settle_elapsed(now)
        return self.state.to_record(identity)
