# src/kemotown/models/follow.py
"""Models describing follow relationships between users."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from kemotown.db.session import Base
from kemotown.db.time import utcnow
from kemotown.models.ids import new_id


class FollowStatus(StrEnum):
    """Lifecycle of a follow request."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class Follow(Base):
    """Directed follow edge from ``follower_id`` to ``following_id``.

    Only ``ACCEPTED`` follows grant visibility and delivery for the
    ``followers`` address.
    """

    __tablename__ = "follow"
    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="uq_follow_pair"),
        Index("ix_follow_following_status", "following_id", "status"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    follower_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    following_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=FollowStatus.PENDING)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
