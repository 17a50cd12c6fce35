"""Inbox-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from kemotown.models.inbox import InboxCategory

CategoryFilter = Literal["all", "mentions", "likes", "follows", "reposts", "replies"]

# Everything a notification list shows; direct messages live elsewhere.
NOTIFICATION_CATEGORIES: tuple[InboxCategory, ...] = tuple(
    category for category in InboxCategory if category is not InboxCategory.DM
)

_FILTERS: dict[str, tuple[InboxCategory, ...]] = {
    "all": NOTIFICATION_CATEGORIES,
    "mentions": (InboxCategory.MENTION,),
    "likes": (InboxCategory.LIKE,),
    "follows": (InboxCategory.FOLLOW,),
    "reposts": (InboxCategory.REPOST,),
    "replies": (InboxCategory.REPLY,),
}


def get_category_filter(name: CategoryFilter | None) -> list[str]:
    """Return the inbox categories a named filter selects."""
    return [category.value for category in _FILTERS[name or "all"]]


class InboxItemResponse(BaseModel):
    """Schema for one notification."""

    id: str
    activity_id: str
    category: str
    priority: int
    read: bool
    read_at: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InboxPage(BaseModel):
    """A page of notifications with the cursor for the next page."""

    items: list[InboxItemResponse]
    next_cursor: str | None = None


class MarkReadRequest(BaseModel):
    """Schema for marking specific inbox items as read."""

    ids: list[str] = Field(..., min_length=1, max_length=100)


class MarkAllReadRequest(BaseModel):
    """Schema for marking every inbox item as read."""

    category: CategoryFilter | None = None


class UnreadCounts(BaseModel):
    """Unread notification counts by category."""

    total: int = 0
    mentions: int = 0
    likes: int = 0
    follows: int = 0
    reposts: int = 0
    replies: int = 0
