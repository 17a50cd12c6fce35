"""Business logic services for the Kemotown application."""

from .activity_service import (
    ActivityConflictError,
    ActivityNotFoundError,
    ActivityPermissionError,
    ActivityService,
)
from .inbox_service import InboxService

__all__ = [
    "ActivityConflictError",
    "ActivityNotFoundError",
    "ActivityPermissionError",
    "ActivityService",
    "InboxService",
]
