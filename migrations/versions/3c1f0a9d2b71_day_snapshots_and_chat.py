"""day snapshots and chat

Revision ID: 3c1f0a9d2b71
Revises:
Create Date: 2026-10-19 09:12:44.310512

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1f0a9d2b71"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create snapshot and chat tables."""
    op.create_table(
        "day_snapshot",
        sa.Column("doc_id", sa.String(length=160), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("day", sa.String(length=10), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("role", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("login_time", sa.BigInteger(), nullable=False),
        sa.Column("last_status_change_at", sa.BigInteger(), nullable=False),
        sa.Column("break_used_minutes", sa.Float(), nullable=False),
        sa.Column("operation_minutes", sa.Float(), nullable=False),
        sa.Column("meeting_minutes", sa.Float(), nullable=False),
        sa.Column("handling_minutes", sa.Float(), nullable=False),
        sa.Column("unavailable_minutes", sa.Float(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("doc_id"),
    )
    op.create_index("ix_day_snapshot_day", "day_snapshot", ["day"])
    op.create_index("ix_day_snapshot_user_id", "day_snapshot", ["user_id"])

    op.create_table(
        "chat_room",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("rules", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=128), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "chat_room_member",
        sa.Column("room_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.ForeignKeyConstraint(["room_id"], ["chat_room.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("room_id", "user_id"),
    )
    op.create_table(
        "chat_message",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("room_id", sa.Integer(), nullable=True),
        sa.Column("sender_user_id", sa.String(length=128), nullable=False),
        sa.Column("recipient_user_id", sa.String(length=128), nullable=True),
        sa.Column("sender_name", sa.Text(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["room_id"], ["chat_room.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_chat_message_room_id", "chat_message", ["room_id"])
    op.create_index("ix_chat_message_sender_user_id", "chat_message", ["sender_user_id"])
    op.create_index("ix_chat_message_recipient_user_id", "chat_message", ["recipient_user_id"])


def downgrade() -> None:
    """Drop snapshot and chat tables."""
    op.drop_index("ix_chat_message_recipient_user_id", table_name="chat_message")
    op.drop_index("ix_chat_message_sender_user_id", table_name="chat_message")
    op.drop_index("ix_chat_message_room_id", table_name="chat_message")
    op.drop_table("chat_message")
    op.drop_table("chat_room_member")
    op.drop_table("chat_room")
    op.drop_index("ix_day_snapshot_user_id", table_name="day_snapshot")
    op.drop_index("ix_day_snapshot_day", table_name="day_snapshot")
    op.drop_table("day_snapshot")
