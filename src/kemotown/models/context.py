# src/kemotown/models/context.py
"""SQLAlchemy models for contexts (groups, events, conventions) and membership."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import JSON, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from kemotown.db.session import Base
from kemotown.db.time import utcnow
from kemotown.models.ids import new_id


class ContextType(StrEnum):
    """Kinds of membership container."""

    GROUP = "GROUP"
    EVENT = "EVENT"
    CONVENTION = "CONVENTION"


class ContextVisibility(StrEnum):
    """Discoverability of a context."""

    PUBLIC = "PUBLIC"
    UNLISTED = "UNLISTED"
    PRIVATE = "PRIVATE"


class MemberRole(StrEnum):
    """Roles a member can hold inside a context."""

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"
    MEMBER = "MEMBER"
    GUEST = "GUEST"


class MembershipStatus(StrEnum):
    """Membership lifecycle; only APPROVED members are addressable."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    BANNED = "BANNED"
    LEFT = "LEFT"


class Context(Base):
    """A group, event or convention that users can join."""

    __tablename__ = "context"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    type: Mapped[str] = mapped_column(String(16), nullable=False, default=ContextType.GROUP)
    slug: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    visibility: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=ContextVisibility.PUBLIC,
    )
    # Ordered plugin identifiers enabled for this context.
    features: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    # Per-plugin context configuration keyed by plugin id.
    plugins: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)


class Membership(Base):
    """A user's role and status inside a context."""

    __tablename__ = "membership"
    __table_args__ = (
        UniqueConstraint("context_id", "user_id", name="uq_membership_context_user"),
        Index("ix_membership_context_status", "context_id", "status"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    context_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("context.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=MemberRole.MEMBER)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=MembershipStatus.PENDING,
    )
    # Plugin-owned member state, e.g. {"event": {"rsvpStatus": "attending"}}.
    plugin_data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    joined_at: Mapped[datetime] = mapped_column(default=utcnow)
