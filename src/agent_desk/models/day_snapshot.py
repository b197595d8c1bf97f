# src/agent_desk/models/day_snapshot.py
"""Persisted per-agent, per-day status snapshots."""

from datetime import datetime

from sqlalchemy import BigInteger, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agent_desk.db.session import Base
from agent_desk.db.time import utcnow


class DaySnapshot(Base):
    """Latest flushed snapshot of one agent's day.

    Keyed by `{day}_{user_id}`; each flush overwrites the row (last write wins).
    Timestamps coming from clients are epoch milliseconds.
    """

    __tablename__ = "day_snapshot"

    doc_id: Mapped[str] = mapped_column(String(160), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    day: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    role: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="unavailable")

    login_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    last_status_change_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    break_used_minutes: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    operation_minutes: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    meeting_minutes: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    handling_minutes: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    unavailable_minutes: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)
