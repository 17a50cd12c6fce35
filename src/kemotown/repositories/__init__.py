"""Data access helpers for Kemotown entities."""

from .activity_repo import ActivityRepository
from .context_repo import ContextRepository
from .follow_repo import FollowRepository
from .inbox_repo import InboxRepository
from .membership_repo import MembershipRepository
from .user_repo import UserRepository

__all__ = [
    "ActivityRepository",
    "ContextRepository",
    "FollowRepository",
    "InboxRepository",
    "MembershipRepository",
    "UserRepository",
]
