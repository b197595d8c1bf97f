"""Pydantic schemas for the Agent Desk API."""

from .chat import (
    ChatMessageCreate,
    ChatMessageResponse,
    ChatRoomCreate,
    ChatRoomResponse,
    DirectMessageCreate,
)
from .snapshot import AgentLiveSummary, DaySnapshotRecord, PresenceEntry, StatusCounts

__all__ = [
    "AgentLiveSummary",
    "ChatMessageCreate",
    "ChatMessageResponse",
    "ChatRoomCreate",
    "ChatRoomResponse",
    "DaySnapshotRecord",
    "DirectMessageCreate",
    "PresenceEntry",
    "StatusCounts",
]
