# src/agent_desk/api/v1/endpoints/snapshots.py
"""Day snapshot document endpoints.

These endpoints are the remote store agents flush to and recover from.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from agent_desk.api.v1.dependencies import CurrentAgentDep, DayDep, SnapshotRepoDep
from agent_desk.repositories.snapshot_repo import to_record
from agent_desk.schemas.snapshot import DaySnapshotRecord

router = APIRouter(prefix="/snapshots", tags=["snapshots"])

logger = logging.getLogger(__name__)


@router.get("", response_model=list[DaySnapshotRecord])
async def list_snapshots(
    _current_agent: CurrentAgentDep,
    repo: SnapshotRepoDep,
    day: DayDep,
) -> list[DaySnapshotRecord]:
    """List every agent snapshot recorded for a day."""
    return [to_record(row) for row in repo.list_for_day(day)]


@router.get("/{doc_id}", response_model=DaySnapshotRecord)
async def get_snapshot(
    doc_id: str,
    _current_agent: CurrentAgentDep,
    repo: SnapshotRepoDep,
) -> DaySnapshotRecord:
    """Get one snapshot by its `{day}_{userId}` key."""
    row = repo.get(doc_id)
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Snapshot not found",
        )
    return to_record(row)


@router.put("/{doc_id}", response_model=DaySnapshotRecord)
async def put_snapshot(
    doc_id: str,
    record: DaySnapshotRecord,
    current_agent: CurrentAgentDep,
    repo: SnapshotRepoDep,
) -> DaySnapshotRecord:
    """Write the caller's own snapshot; the latest write replaces the stored one."""
    if doc_id != record.doc_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Document key must be {day}_{userId}",
        )
    if record.user_id != current_agent.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Agents may only write their own snapshot",
        )

    row = repo.upsert(record)
    logger.debug("Stored snapshot %s (status=%s)", doc_id, row.status)
    return to_record(row)
