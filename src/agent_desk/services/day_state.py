"""Status vocabulary and the per-agent, per-day time record."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, tzinfo
from enum import Enum

from agent_desk.db.time import from_epoch_ms, to_epoch_ms
from agent_desk.schemas.snapshot import DaySnapshotRecord
from agent_desk.services.errors import StaleDayState


class AgentStatus(str, Enum):
    """Mutually exclusive work states of an agent."""

    OPERATING = "operating"
    BREAK = "break"
    MEETING = "meeting"
    HANDLING = "handling"
    UNAVAILABLE = "unavailable"

    @classmethod
    def parse(cls, value: object) -> AgentStatus:
        """Return the status for `value`, treating anything unknown as unavailable."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNAVAILABLE

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


STATUS_LABELS: dict[AgentStatus, str] = {
    AgentStatus.OPERATING: "In Operation",
    AgentStatus.BREAK: "In Break",
    AgentStatus.MEETING: "In Meeting",
    AgentStatus.HANDLING: "Handling",
    AgentStatus.UNAVAILABLE: "Unavailable",
}


class PresenceTier(str, Enum):
    """Coarse presence dot shown next to an agent in chat."""

    ACTIVE = "active"
    CAUTION = "caution"
    INACTIVE = "inactive"


def presence_tier(status: object) -> PresenceTier:
    """Map a status (or raw status string) to its presence tier."""
    parsed = AgentStatus.parse(status)
    if parsed in (AgentStatus.OPERATING, AgentStatus.HANDLING):
        return PresenceTier.ACTIVE
    if parsed in (AgentStatus.MEETING, AgentStatus.BREAK):
        return PresenceTier.CAUTION
    return PresenceTier.INACTIVE


@dataclass(frozen=True)
class AgentIdentity:
    """Identity claims handed over by the external identity provider."""

    user_id: str
    name: str = ""
    role: str = ""


def snapshot_doc_id(day: str, user_id: str) -> str:
    """Return the remote document key for one agent's day."""
    return f"{day}_{user_id}"


def _zeroed_minutes() -> dict[AgentStatus, float]:
    return {status: 0.0 for status in AgentStatus}


@dataclass
class DayState:
    """Cumulative minutes per status for one agent on one calendar day.

    `minutes_by_status` holds settled time only; time since
    `last_status_change_at` is folded in by the ledger on demand.
    """

    user_id: str
    day: str
    status: AgentStatus
    last_status_change_at: datetime
    login_at: datetime
    minutes_by_status: dict[AgentStatus, float] = field(default_factory=_zeroed_minutes)

    def __post_init__(self) -> None:
        for status in AgentStatus:
            self.minutes_by_status.setdefault(status, 0.0)

    @classmethod
    def fresh(cls, user_id: str, day: str, now: datetime) -> DayState:
        """Create the first state of the day: all counters zero, operating."""
        return cls(
            user_id=user_id,
            day=day,
            status=AgentStatus.OPERATING,
            last_status_change_at=now,
            login_at=now,
        )

    def ensure_current(self, user_id: str, today: str) -> None:
        """Raise StaleDayState unless this state belongs to `user_id` today."""
        if self.user_id != user_id:
            raise StaleDayState(f"Day state belongs to {self.user_id!r}, not {user_id!r}")
        if self.day != today:
            raise StaleDayState(f"Day state is for {self.day}, today is {today}")

    def to_record(self, identity: AgentIdentity | None = None) -> DaySnapshotRecord:
        """Serialize the settled counters into the snapshot wire format."""
        minutes = self.minutes_by_status
        return DaySnapshotRecord(
            user_id=self.user_id,
            name=identity.name if identity else "",
            role=identity.role if identity else "",
            day=self.day,
            status=self.status.value,
            login_time=to_epoch_ms(self.login_at),
            last_status_change_at=to_epoch_ms(self.last_status_change_at),
            break_used_minutes=minutes[AgentStatus.BREAK],
            operation_minutes=minutes[AgentStatus.OPERATING],
            meeting_minutes=minutes[AgentStatus.MEETING],
            handling_minutes=minutes[AgentStatus.HANDLING],
            unavailable_minutes=minutes[AgentStatus.UNAVAILABLE],
        )

    @classmethod
    def from_record(
        cls,
        record: DaySnapshotRecord,
        *,
        resume_at: datetime | None = None,
        tz: tzinfo = UTC,
    ) -> DayState:
        """Rebuild a state from a snapshot.

        When `resume_at` is given the accrual point is moved there, so nothing
        between the snapshot and `resume_at` is credited to any bucket.
        """
        last_change = resume_at if resume_at is not None else from_epoch_ms(
            record.last_status_change_at, tz
        )
        return cls(
            user_id=record.user_id,
            day=record.day,
            status=AgentStatus.parse(record.status),
            last_status_change_at=last_change,
            login_at=from_epoch_ms(record.login_time, tz),
            minutes_by_status={
                AgentStatus.BREAK: record.break_used_minutes,
                AgentStatus.OPERATING: record.operation_minutes,
                AgentStatus.MEETING: record.meeting_minutes,
                AgentStatus.HANDLING: record.handling_minutes,
                AgentStatus.UNAVAILABLE: record.unavailable_minutes,
            },
        )
