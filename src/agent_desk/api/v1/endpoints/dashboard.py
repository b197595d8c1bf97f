# src/agent_desk/api/v1/endpoints/dashboard.py
"""Supervisor dashboard and presence endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from agent_desk.api.v1.dependencies import ClockDep, CurrentAgentDep, DayDep, SnapshotRepoDep
from agent_desk.repositories.snapshot_repo import to_record
from agent_desk.schemas.snapshot import AgentLiveSummary, PresenceEntry, StatusCounts
from agent_desk.services.aggregator import count_statuses, live_summary, presence_entries

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/status-counts", response_model=StatusCounts)
async def get_status_counts(
    _current_agent: CurrentAgentDep,
    repo: SnapshotRepoDep,
    day: DayDep,
) -> StatusCounts:
    """Count agents per status for a day."""
    records = [to_record(row) for row in repo.list_for_day(day)]
    return count_statuses(day, records)


@router.get("/presence", response_model=list[PresenceEntry])
async def get_presence(
    _current_agent: CurrentAgentDep,
    repo: SnapshotRepoDep,
    day: DayDep,
) -> list[PresenceEntry]:
    """Return the chat presence tier of every agent seen on a day."""
    return presence_entries(to_record(row) for row in repo.list_for_day(day))


@router.get("/agents", response_model=list[AgentLiveSummary])
async def get_agent_summaries(
    _current_agent: CurrentAgentDep,
    repo: SnapshotRepoDep,
    clock: ClockDep,
    day: DayDep,
) -> list[AgentLiveSummary]:
    """Return each agent's minutes recomputed as of now from their last flush."""
    now = clock.now()
    accrue = day == clock.today_key(now)
    return [
        live_summary(to_record(row), now, accrue=accrue)
        for row in repo.list_for_day(day)
    ]
