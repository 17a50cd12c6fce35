"""Data access helpers for activities."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from kemotown.db.time import utcnow
from kemotown.models.activity import Activity

__all__ = ["ActivityRepository"]

PUBLIC = "public"


class ActivityRepository:
    """Thin wrapper around database access for activities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, activity_id: str, *, include_deleted: bool = False) -> Activity | None:
        """Return an activity by identifier, hiding soft-deleted rows by default."""
        activity = self.session.get(Activity, activity_id)
        if activity is None or (activity.deleted and not include_deleted):
            return None
        return activity

    def create(
        self,
        *,
        type: str,
        actor_id: str,
        to: list[str],
        cc: list[str] | None = None,
        object_type: str | None = None,
        object_id: str | None = None,
        object: dict[str, Any] | None = None,
        context_id: str | None = None,
        in_reply_to: str | None = None,
    ) -> Activity:
        """Insert a new activity and return the persisted ORM instance."""
        cc = list(cc or [])
        activity = Activity(
            type=str(type),
            actor_id=actor_id,
            to=list(to),
            cc=cc,
            is_public=PUBLIC in to or PUBLIC in cc,
            object_type=object_type,
            object_id=object_id,
            object=object,
            context_id=context_id,
            in_reply_to=in_reply_to,
        )
        self.session.add(activity)
        self.session.flush()
        return activity

    def find_live(self, type: str, actor_id: str, object_id: str) -> Activity | None:
        """Return a non-deleted activity of ``type`` by ``actor_id`` on ``object_id``."""
        result = self.session.execute(
            select(Activity).where(
                Activity.type == str(type),
                Activity.actor_id == actor_id,
                Activity.object_id == object_id,
                Activity.deleted.is_(False),
            )
        )
        return result.scalars().first()

    def soft_delete(self, activity: Activity) -> Activity:
        """Flag the activity as deleted."""
        activity.deleted = True
        activity.deleted_at = utcnow()
        self.session.flush()
        return activity

    def list_recent(
        self,
        limit: int,
        *,
        public_only: bool = False,
        before: datetime | None = None,
    ) -> list[Activity]:
        """Return live activities sorted newest first."""
        stmt = select(Activity).where(Activity.deleted.is_(False))
        if public_only:
            stmt = stmt.where(Activity.is_public.is_(True))
        if before is not None:
            stmt = stmt.where(Activity.published < before)
        stmt = stmt.order_by(Activity.published.desc(), Activity.id.desc()).limit(limit)
        return list(self.session.execute(stmt).scalars())
