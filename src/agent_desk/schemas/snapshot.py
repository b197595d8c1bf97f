"""Snapshot and supervisor dashboard Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class DaySnapshotRecord(BaseModel):
    """Persisted representation of one agent's day, keyed by `{day}_{userId}`.

    The same shape is written to the remote store and to the device cache.
    `status` is kept as a free string; readers map unknown values to unavailable.
    """

    user_id: str = Field(..., alias="userId", min_length=1)
    name: str = Field("", description="Display name of the agent")
    role: str = Field("", description="Role claim from the identity provider")
    day: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="Local calendar day key")
    status: str = Field("unavailable", description="Current status key")
    login_time: int = Field(..., alias="loginTime", ge=0, description="Epoch ms of first login")
    last_status_change_at: int = Field(
        ...,
        alias="lastStatusChangeAt",
        ge=0,
        description="Epoch ms of the last transition or resume point",
    )
    break_used_minutes: float = Field(0.0, alias="breakUsedMinutes", ge=0)
    operation_minutes: float = Field(0.0, alias="operationMinutes", ge=0)
    meeting_minutes: float = Field(0.0, alias="meetingMinutes", ge=0)
    handling_minutes: float = Field(0.0, alias="handlingMinutes", ge=0)
    unavailable_minutes: float = Field(0.0, alias="unavailableMinutes", ge=0)
    updated_at: datetime | None = Field(None, alias="updatedAt", description="Server-assigned")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    @property
    def doc_id(self) -> str:
        """Return the document key this record is stored under."""
        return f"{self.day}_{self.user_id}"


class StatusCounts(BaseModel):
    """Number of agents currently in each status."""

    day: str
    operating: int = 0
    break_: int = Field(0, alias="break")
    meeting: int = 0
    handling: int = 0
    unavailable: int = 0
    total: int = 0

    model_config = ConfigDict(populate_by_name=True)


class PresenceEntry(BaseModel):
    """Presence dot information consumed by the chat layer."""

    user_id: str = Field(..., alias="userId")
    name: str
    status: str
    tier: str

    model_config = ConfigDict(populate_by_name=True)


class AgentLiveSummary(BaseModel):
    """Live minute totals for one agent as of the server's current time."""

    user_id: str = Field(..., alias="userId")
    name: str
    role: str
    status: str
    label: str
    break_used: float = Field(..., alias="breakUsed")
    operating: float
    meeting: float
    handling: float
    unavailable: float
    worked_minutes: float = Field(..., alias="workedMinutes")
    break_remaining: float = Field(..., alias="breakRemaining")

    model_config = ConfigDict(populate_by_name=True)
