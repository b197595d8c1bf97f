# src/agent_desk/models/__init__.py
"""SQLAlchemy models for the Agent Desk application."""

from .chat import ChatMessage, ChatRoom, ChatRoomMember
from .day_snapshot import DaySnapshot

__all__ = [
    "ChatMessage", "ChatRoom", "ChatRoomMember",
    "DaySnapshot",
]
