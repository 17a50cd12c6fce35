"""Pydantic schemas for API validation and serialization."""

from .activity import (
    ActivityResponse,
    AddressingPreviewRequest,
    AnnounceCreate,
    DeliveryPreviewResponse,
    NoteCreate,
    validate_address,
)
from .inbox import (
    CategoryFilter,
    InboxItemResponse,
    InboxPage,
    MarkAllReadRequest,
    MarkReadRequest,
    UnreadCounts,
    get_category_filter,
)

__all__ = [
    "ActivityResponse",
    "AddressingPreviewRequest",
    "AnnounceCreate",
    "CategoryFilter",
    "DeliveryPreviewResponse",
    "InboxItemResponse",
    "InboxPage",
    "MarkAllReadRequest",
    "MarkReadRequest",
    "NoteCreate",
    "UnreadCounts",
    "get_category_filter",
    "validate_address",
]
