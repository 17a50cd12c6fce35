# src/kemotown/models/activity.py
"""SQLAlchemy model for activities and their addressing."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import JSON, Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from kemotown.db.session import Base
from kemotown.db.time import utcnow
from kemotown.models.ids import new_id


class ActivityType(StrEnum):
    """Activity verbs, including the ones plugins introduce."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LIKE = "LIKE"
    ANNOUNCE = "ANNOUNCE"
    FOLLOW = "FOLLOW"
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
    UNDO = "UNDO"
    RSVP = "RSVP"
    CHECKIN = "CHECKIN"
    JOIN = "JOIN"
    LEAVE = "LEAVE"
    INVITE = "INVITE"
    FLAG = "FLAG"
    BLOCK = "BLOCK"


class Activity(Base):
    """A single user or system action.

    ``to`` and ``cc`` hold raw address strings and are the complete
    addressing of the activity. ``is_public`` mirrors whether ``public``
    appears in either list so public timelines can be queried; visibility
    checks always re-read the address lists.
    """

    __tablename__ = "activity"
    __table_args__ = (
        Index("ix_activity_actor", "actor_id"),
        Index("ix_activity_public_published", "is_public", "published"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    actor_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    object_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    object_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    object: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    to: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    cc: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    context_id: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("context.id", ondelete="SET NULL"),
        nullable=True,
    )
    in_reply_to: Mapped[str | None] = mapped_column(String(64), nullable=True)

    published: Mapped[datetime] = mapped_column(default=utcnow)
    deleted: Mapped[bool] = mapped_column(default=False, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(nullable=True)
