# src/kemotown/models/inbox.py
"""Per-user delivery records for activities."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from kemotown.db.session import Base
from kemotown.db.time import utcnow
from kemotown.models.ids import new_id


class InboxCategory(StrEnum):
    """Why an inbox item was delivered."""

    DEFAULT = "DEFAULT"
    FOLLOW = "FOLLOW"
    MENTION = "MENTION"
    LIKE = "LIKE"
    REPOST = "REPOST"
    REPLY = "REPLY"
    EVENT = "EVENT"
    GROUP = "GROUP"
    SYSTEM = "SYSTEM"
    DM = "DM"


class InboxItem(Base):
    """Delivery of one activity to one user.

    The ``(user_id, activity_id)`` pair is unique; delivery inserts skip rows
    that would violate it, which keeps repeated delivery a no-op.
    """

    __tablename__ = "inbox_item"
    __table_args__ = (
        UniqueConstraint("user_id", "activity_id", name="uq_inbox_user_activity"),
        Index("ix_inbox_user_read", "user_id", "read"),
        Index("ix_inbox_activity", "activity_id"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    activity_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("activity.id", ondelete="CASCADE"),
        nullable=False,
    )
    category: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=InboxCategory.DEFAULT,
    )
    # Higher values rank first.
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    read_at: Mapped[datetime | None] = mapped_column(nullable=True)
    muted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
