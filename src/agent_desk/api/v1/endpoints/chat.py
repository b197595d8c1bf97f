# src/agent_desk/api/v1/endpoints/chat.py
"""Room and direct message endpoints for agent chat."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import and_, desc, or_
from sqlalchemy.orm import Session

from agent_desk.api.v1.dependencies import CurrentAgentDep, SessionDep
from agent_desk.models import ChatMessage, ChatRoom, ChatRoomMember
from agent_desk.schemas.chat import (
    ChatMessageCreate,
    ChatMessageResponse,
    ChatRoomCreate,
    ChatRoomResponse,
    DirectMessageCreate,
)

router = APIRouter(prefix="/chat", tags=["chat"])

LimitQuery = Annotated[int, Query(ge=1, le=100)]


def _serialize_room(room: ChatRoom) -> ChatRoomResponse:
    """Serialize a ChatRoom instance into API payload form."""
    return ChatRoomResponse(
        id=room.id,
        name=room.name,
        rules=room.rules,
        created_by=room.created_by,
        created_at=room.created_at,
        members=sorted(member.user_id for member in room.members),
    )


def _get_member_room(db: Session, room_id: int, user_id: str) -> ChatRoom:
    """Return the room if the caller belongs to it."""
    room = db.query(ChatRoom).filter(ChatRoom.id == room_id).first()
    if room is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Room not found",
        )
    if not any(member.user_id == user_id for member in room.members):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not a member of this room",
        )
    return room


@router.post("/rooms", response_model=ChatRoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(
    room_data: ChatRoomCreate,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> ChatRoomResponse:
    """Create a group room; the creator is always a member."""
    member_ids = {current_agent.user_id}
    member_ids.update(user_id.strip() for user_id in room_data.members if user_id.strip())

    room = ChatRoom(
        name=room_data.name,
        rules=(room_data.rules or "").strip() or None,
        created_by=current_agent.user_id,
    )
    room.members = [ChatRoomMember(user_id=user_id) for user_id in sorted(member_ids)]
    db.add(room)
    db.commit()
    db.refresh(room)
    return _serialize_room(room)


@router.get("/rooms", response_model=list[ChatRoomResponse])
async def list_rooms(
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> list[ChatRoomResponse]:
    """List the caller's rooms, newest first."""
    rooms = (
        db.query(ChatRoom)
        .join(ChatRoomMember, ChatRoomMember.room_id == ChatRoom.id)
        .filter(ChatRoomMember.user_id == current_agent.user_id)
        .order_by(desc(ChatRoom.created_at), desc(ChatRoom.id))
        .all()
    )
    return [_serialize_room(room) for room in rooms]


@router.post(
    "/rooms/{room_id}/messages",
    response_model=ChatMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def post_room_message(
    room_id: int,
    message_data: ChatMessageCreate,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> ChatMessage:
    """Post a message to a room the caller belongs to."""
    room = _get_member_room(db, room_id, current_agent.user_id)
    message = ChatMessage(
        room_id=room.id,
        sender_user_id=current_agent.user_id,
        sender_name=current_agent.name,
        body=message_data.body,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


@router.get("/rooms/{room_id}/messages", response_model=list[ChatMessageResponse])
async def list_room_messages(
    room_id: int,
    current_agent: CurrentAgentDep,
    db: SessionDep,
    limit: LimitQuery = 50,
    before: int | None = Query(None),
) -> list[ChatMessage]:
    """List room messages, newest first."""
    room = _get_member_room(db, room_id, current_agent.user_id)
    query = db.query(ChatMessage).filter(ChatMessage.room_id == room.id)
    if before is not None:
        query = query.filter(ChatMessage.id < before)
    return query.order_by(desc(ChatMessage.id)).limit(limit).all()


@router.post("/direct", response_model=ChatMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_direct_message(
    message_data: DirectMessageCreate,
    current_agent: CurrentAgentDep,
    db: SessionDep,
) -> ChatMessage:
    """Send a direct message to another user."""
    message = ChatMessage(
        sender_user_id=current_agent.user_id,
        sender_name=current_agent.name,
        recipient_user_id=message_data.recipient_user_id,
        body=message_data.body,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


@router.get("/direct/{peer_id}", response_model=list[ChatMessageResponse])
async def get_conversation(
    peer_id: str,
    current_agent: CurrentAgentDep,
    db: SessionDep,
    limit: LimitQuery = 50,
    before: int | None = Query(None),
) -> list[ChatMessage]:
    """Return the direct conversation between the caller and `peer_id`, newest first."""
    me = current_agent.user_id
    query = db.query(ChatMessage).filter(
        ChatMessage.room_id.is_(None),
        or_(
            and_(ChatMessage.sender_user_id == me, ChatMessage.recipient_user_id == peer_id),
            and_(ChatMessage.sender_user_id == peer_id, ChatMessage.recipient_user_id == me),
        ),
    )
    if before is not None:
        query = query.filter(ChatMessage.id < before)
    return query.order_by(desc(ChatMessage.id)).limit(limit).all()
