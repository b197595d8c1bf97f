# src/agent_desk/models/chat.py
"""Models describing chat rooms and messages between agents."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agent_desk.db.session import Base
from agent_desk.db.time import utcnow


class ChatRoom(Base):
    """Group conversation with a fixed member list and optional house rules."""

    __tablename__ = "chat_room"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    rules: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str] = mapped_column(String(128), nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    members: Mapped[list[ChatRoomMember]] = relationship(
        "ChatRoomMember",
        back_populates="room",
        cascade="all, delete-orphan",
    )


class ChatRoomMember(Base):
    """Membership of one user in a chat room."""

    __tablename__ = "chat_room_member"

    room_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("chat_room.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)

    room: Mapped[ChatRoom] = relationship("ChatRoom", back_populates="members")


class ChatMessage(Base):
    """Plain-text message posted to a room or sent directly to one user.

    Exactly one of `room_id` and `recipient_user_id` is set.
    """

    __tablename__ = "chat_message"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    room_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("chat_room.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    sender_user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    recipient_user_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    sender_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
