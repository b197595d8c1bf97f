"""Data access helpers for day snapshots."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from agent_desk.db.time import utcnow
from agent_desk.models.day_snapshot import DaySnapshot
from agent_desk.schemas.snapshot import DaySnapshotRecord

__all__ = ["SnapshotRepository", "to_record"]

_FIELDS = (
    "user_id",
    "day",
    "name",
    "role",
    "status",
    "login_time",
    "last_status_change_at",
    "break_used_minutes",
    "operation_minutes",
    "meeting_minutes",
    "handling_minutes",
    "unavailable_minutes",
)


def to_record(row: DaySnapshot) -> DaySnapshotRecord:
    """Convert a DaySnapshot row to its wire schema."""
    return DaySnapshotRecord.model_validate(row)


class SnapshotRepository:
    """Thin wrapper around database access for day snapshots."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get(self, doc_id: str) -> DaySnapshot | None:
        """Return a snapshot by document key."""
        return self.session.get(DaySnapshot, doc_id)

    def list_for_day(self, day: str) -> list[DaySnapshot]:
        """Return every snapshot of `day`, ordered by agent name."""
        result = self.session.execute(
            select(DaySnapshot)
            .where(DaySnapshot.day == day)
            .order_by(DaySnapshot.name, DaySnapshot.user_id)
        )
        return list(result.scalars())

    def upsert(self, record: DaySnapshotRecord) -> DaySnapshot:
        """Insert or overwrite the snapshot for `record.doc_id`.

        No merging happens: whatever arrives last replaces the stored row.
        """
        row = self.get(record.doc_id)
        if row is None:
            row = DaySnapshot(doc_id=record.doc_id)
            self.session.add(row)
        for name in _FIELDS:
            setattr(row, name, getattr(record, name))
        row.updated_at = utcnow()
        self.session.commit()
        self.session.refresh(row)
        return row
