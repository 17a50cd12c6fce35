"""Notification listing, unread counts and read state."""

from __future__ import annotations

from sqlalchemy.orm import Session

from kemotown.core.settings import settings
from kemotown.db.time import utcnow
from kemotown.models.inbox import InboxCategory, InboxItem
from kemotown.repositories.inbox_repo import InboxRepository
from kemotown.schemas.inbox import CategoryFilter, UnreadCounts, get_category_filter


class InboxService:
    """Read-side operations over a user's inbox."""

    def __init__(self, session: Session) -> None:
        self.inbox = InboxRepository(session)

    def list_notifications(
        self,
        user_id: str,
        *,
        category: CategoryFilter = "all",
        unread_only: bool = False,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> tuple[list[InboxItem], str | None]:
        """Return one page of notifications and the cursor of the next page.

        The cursor is the id of the last item returned. Cursors that do not
        belong to ``user_id`` are ignored.
        """
        limit = limit or settings.inbox_page_size
        after = self.inbox.get_by_id(cursor) if cursor else None
        if after is not None and after.user_id != user_id:
            after = None

        items = self.inbox.list_for_user(
            user_id,
            get_category_filter(category),
            unread_only=unread_only,
            after=after,
            limit=limit + 1,
        )
        has_more = len(items) > limit
        page = items[:limit]
        next_cursor = page[-1].id if has_more and page else None
        return page, next_cursor

    def unread_counts(self, user_id: str) -> UnreadCounts:
        """Return unread notification counts; direct messages are not counted."""
        counts = self.inbox.count_unread_by_category(user_id)
        return UnreadCounts(
            total=sum(n for category, n in counts.items() if category != InboxCategory.DM),
            mentions=counts.get(InboxCategory.MENTION.value, 0),
            likes=counts.get(InboxCategory.LIKE.value, 0),
            follows=counts.get(InboxCategory.FOLLOW.value, 0),
            reposts=counts.get(InboxCategory.REPOST.value, 0),
            replies=counts.get(InboxCategory.REPLY.value, 0),
        )

    def mark_items_read(self, user_id: str, item_ids: list[str]) -> int:
        """Mark the given items read; items of other users are left alone."""
        return self.inbox.mark_ids_read(user_id, item_ids, utcnow())
