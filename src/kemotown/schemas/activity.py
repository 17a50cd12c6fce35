"""Activity-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

# Accepted for backward compatibility only; the address parser does not
# recognize ``event:`` and treats it as matching nobody.
LEGACY_EVENT_PREFIX = "event:"


def validate_address(value: str) -> str:
    """Reject strings outside the address grammar."""
    if value in ("public", "followers"):
        return value
    for prefix in ("user:", "context:", LEGACY_EVENT_PREFIX):
        if value.startswith(prefix):
            if len(value) > len(prefix):
                return value
            break
    raise ValueError(
        "Invalid address format. Use: public, followers, user:{id}, or context:{id}[:modifier]"
    )


Address = Annotated[str, AfterValidator(validate_address)]


class NoteCreate(BaseModel):
    """Schema for creating a note (post, comment or direct message)."""

    content: str = Field(..., min_length=1, max_length=5000)
    summary: str | None = Field(None, max_length=200, description="Content warning")
    sensitive: bool = False
    to: list[Address] = Field(..., min_length=1)
    cc: list[Address] = Field(default_factory=list)
    in_reply_to: str | None = None
    context_id: str | None = Field(None, description="Group, event or convention id")
    mentions: list[str] | None = Field(
        None,
        description="Explicit mentioned usernames; scanned from content when omitted",
    )


class AnnounceCreate(BaseModel):
    """Schema for reposting a public activity."""

    to: list[Address] = Field(default_factory=lambda: ["public"], min_length=1)
    cc: list[Address] = Field(default_factory=lambda: ["followers"])


class AddressingPreviewRequest(BaseModel):
    """Addressing to preview before an activity is created."""

    to: list[Address] = Field(..., min_length=1)
    cc: list[Address] = Field(default_factory=list)


class DeliveryPreviewResponse(BaseModel):
    """Compose-time summary of an activity's reach."""

    recipient_count: int
    has_public: bool
    has_followers: bool
    context_ids: list[str]
    direct_user_ids: list[str]

    model_config = ConfigDict(from_attributes=True)


class ActivityResponse(BaseModel):
    """Schema for activity information returned by the API."""

    id: str
    type: str
    actor_id: str
    object_type: str | None = None
    object_id: str | None = None
    object: dict[str, Any] | None = None
    to: list[str]
    cc: list[str]
    context_id: str | None = None
    in_reply_to: str | None = None
    published: datetime

    model_config = ConfigDict(from_attributes=True)
