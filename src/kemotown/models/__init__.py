# src/kemotown/models/__init__.py
"""SQLAlchemy models for the Kemotown application."""

from .activity import Activity, ActivityType
from .context import Context, ContextType, ContextVisibility, MemberRole, Membership, MembershipStatus
from .follow import Follow, FollowStatus
from .inbox import InboxCategory, InboxItem
from .user import User

__all__ = [
    "Activity", "ActivityType",
    "Context", "ContextType", "ContextVisibility",
    "Membership", "MemberRole", "MembershipStatus",
    "Follow", "FollowStatus",
    "InboxItem", "InboxCategory",
    "User",
]
