"""Chat room and message Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _require_text(value: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise ValueError("must not be blank")
    return stripped


class ChatRoomCreate(BaseModel):
    """Schema for creating a group chat room."""

    name: str = Field(..., max_length=120, description="Room display name")
    rules: str | None = Field(None, description="Optional house rules shown under the title")
    members: list[str] = Field(default_factory=list, description="User ids to invite")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject blank room names."""
        return _require_text(v)


class ChatRoomResponse(BaseModel):
    """Schema for chat room information returned by the API."""

    id: int
    name: str
    rules: str | None
    created_by: str
    created_at: datetime
    members: list[str]


class ChatMessageCreate(BaseModel):
    """Schema for posting a message to a room."""

    body: str = Field(..., max_length=4000)

    @field_validator("body")
    @classmethod
    def validate_body(cls, v: str) -> str:
        """Reject blank messages."""
        return _require_text(v)


class DirectMessageCreate(ChatMessageCreate):
    """Schema for sending a direct message."""

    recipient_user_id: str = Field(..., min_length=1, description="Recipient user id")

    @field_validator("recipient_user_id")
    @classmethod
    def validate_recipient(cls, v: str) -> str:
        """Reject blank recipients."""
        return _require_text(v)


class ChatMessageResponse(BaseModel):
    """Schema for a chat message returned by the API."""

    id: int
    room_id: int | None
    sender_user_id: str
    sender_name: str
    recipient_user_id: str | None
    body: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
