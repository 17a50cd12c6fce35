"""Data access helpers for inbox items."""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from sqlalchemy import Insert, and_, delete, func, or_, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from kemotown.db.time import utcnow
from kemotown.models.ids import new_id
from kemotown.models.inbox import InboxItem

__all__ = ["InboxRepository"]

# Keeps multi-row VALUES under SQLite's bound-parameter limit.
INSERT_CHUNK_SIZE = 500


class InboxRepository:
    """Thin wrapper around database access for inbox items."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def _insert_ignoring_duplicates(self, rows: list[dict[str, Any]]) -> Insert:
        """Build an INSERT that skips rows violating ``(user_id, activity_id)``."""
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(InboxItem).values(rows).on_conflict_do_nothing(
                index_elements=[InboxItem.user_id, InboxItem.activity_id],
            )
        if dialect == "sqlite":
            return sqlite.insert(InboxItem).values(rows).on_conflict_do_nothing(
                index_elements=[InboxItem.user_id, InboxItem.activity_id],
            )
        if dialect in {"mysql", "mariadb"}:
            return InboxItem.__table__.insert().values(rows).prefix_with("IGNORE")
        raise NotImplementedError(f"insert-or-ignore is not available for dialect {dialect!r}")

    def create_many_skip_duplicates(self, items: Iterable[Mapping[str, Any]]) -> int:
        """Insert inbox rows, silently skipping ``(user_id, activity_id)`` duplicates.

        Args:
            items: Mappings with ``user_id``, ``activity_id``, ``category`` and an
                optional ``priority``.

        Returns:
            Number of rows submitted (duplicates included).
        """
        now = utcnow()
        rows = [
            {
                "id": new_id(),
                "user_id": item["user_id"],
                "activity_id": item["activity_id"],
                "category": str(item["category"]),
                "priority": int(item.get("priority", 0)),
                "read": False,
                "read_at": None,
                "muted": False,
                "created_at": now,
            }
            for item in items
        ]
        for start in range(0, len(rows), INSERT_CHUNK_SIZE):
            self.session.execute(self._insert_ignoring_duplicates(rows[start:start + INSERT_CHUNK_SIZE]))
        self.session.flush()
        return len(rows)

    def delete_for_activity(self, activity_id: str) -> int:
        """Delete every inbox row for ``activity_id``."""
        result = self.session.execute(
            delete(InboxItem)
            .where(InboxItem.activity_id == activity_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    def mark_read(self, user_id: str, activity_id: str, read_at: datetime) -> int:
        """Mark one user's item for ``activity_id`` as read."""
        result = self.session.execute(
            update(InboxItem)
            .where(InboxItem.user_id == user_id, InboxItem.activity_id == activity_id)
            .values(read=True, read_at=read_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    def mark_ids_read(self, user_id: str, item_ids: Iterable[str], read_at: datetime) -> int:
        """Mark the given unread items owned by ``user_id`` as read."""
        ids = list(item_ids)
        if not ids:
            return 0
        result = self.session.execute(
            update(InboxItem)
            .where(
                InboxItem.id.in_(ids),
                InboxItem.user_id == user_id,
                InboxItem.read.is_(False),
            )
            .values(read=True, read_at=read_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    def mark_all_read(
        self,
        user_id: str,
        read_at: datetime,
        categories: Iterable[str] | None = None,
    ) -> int:
        """Mark all unread items for a user as read, optionally by category."""
        stmt = update(InboxItem).where(
            InboxItem.user_id == user_id,
            InboxItem.read.is_(False),
        )
        if categories is not None:
            stmt = stmt.where(InboxItem.category.in_([str(c) for c in categories]))
        result = self.session.execute(
            stmt.values(read=True, read_at=read_at).execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    def update_priority(self, activity_id: str, priority: int, category: str | None = None) -> int:
        """Set ``priority`` on the rows of an activity, optionally for one category."""
        stmt = update(InboxItem).where(InboxItem.activity_id == activity_id)
        if category is not None:
            stmt = stmt.where(InboxItem.category == str(category))
        result = self.session.execute(
            stmt.values(priority=priority).execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    def list_for_user(
        self,
        user_id: str,
        categories: Iterable[str],
        *,
        unread_only: bool = False,
        after: InboxItem | None = None,
        limit: int = 20,
    ) -> list[InboxItem]:
        """Return unmuted items newest first, continuing past ``after`` when given."""
        stmt = select(InboxItem).where(
            InboxItem.user_id == user_id,
            InboxItem.category.in_([str(c) for c in categories]),
            InboxItem.muted.is_(False),
        )
        if unread_only:
            stmt = stmt.where(InboxItem.read.is_(False))
        if after is not None:
            # Rows from one batch share created_at, so the id breaks ties.
            stmt = stmt.where(
                or_(
                    InboxItem.created_at < after.created_at,
                    and_(InboxItem.created_at == after.created_at, InboxItem.id < after.id),
                )
            )
        stmt = stmt.order_by(InboxItem.created_at.desc(), InboxItem.id.desc()).limit(limit)
        return list(self.session.execute(stmt).scalars())

    def get_by_id(self, item_id: str) -> InboxItem | None:
        """Return an inbox item by identifier."""
        return self.session.get(InboxItem, item_id)

    def count_unread_by_category(self, user_id: str) -> dict[str, int]:
        """Return unread, unmuted item counts keyed by category."""
        result = self.session.execute(
            select(InboxItem.category, func.count())
            .where(
                InboxItem.user_id == user_id,
                InboxItem.read.is_(False),
                InboxItem.muted.is_(False),
            )
            .group_by(InboxItem.category)
        )
        return {category: count for category, count in result.all()}
