"""Addressing value types.

Addresses travel as plain strings (``public``, ``followers``, ``user:{id}``,
``context:{id}[:modifier]``). They are parsed into the closed
:class:`ParsedAddress` union at the boundary so the visibility and delivery
code can dispatch on :class:`AddressKind` and :class:`ContextAudience`
instead of re-matching substrings.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

PUBLIC = "public"
FOLLOWERS = "followers"
USER_PREFIX = "user:"
CONTEXT_PREFIX = "context:"

MODIFIER_ADMINS = "admins"
MODIFIER_MODERATORS = "moderators"
MODIFIER_ROLE_PREFIX = "role:"


class AddressKind(StrEnum):
    """Top-level address tag."""

    PUBLIC = "public"
    FOLLOWERS = "followers"
    USER = "user"
    CONTEXT = "context"
    UNKNOWN = "unknown"


class ContextAudience(StrEnum):
    """Which members of a context an address selects."""

    ALL = "all"
    ADMINS = "admins"
    MODERATORS = "moderators"
    ROLE = "role"
    PLUGIN = "plugin"


@dataclass(frozen=True, slots=True)
class ParsedAddress:
    """Structured form of an address string.

    Attributes:
        kind: Address tag.
        raw: The original string.
        id: User or context id for ``user``/``context`` kinds.
        modifier: Text after the context id, e.g. ``admins`` or ``role:MODERATOR``.
    """

    kind: AddressKind
    raw: str
    id: str | None = None
    modifier: str | None = None

    @property
    def audience(self) -> ContextAudience | None:
        """Classify a context modifier; None for non-context addresses."""
        if self.kind is not AddressKind.CONTEXT:
            return None
        if self.modifier is None:
            return ContextAudience.ALL
        if self.modifier == MODIFIER_ADMINS:
            return ContextAudience.ADMINS
        if self.modifier == MODIFIER_MODERATORS:
            return ContextAudience.MODERATORS
        if self.modifier.startswith(MODIFIER_ROLE_PREFIX):
            return ContextAudience.ROLE
        return ContextAudience.PLUGIN

    @property
    def role(self) -> str | None:
        """Role named by a ``role:{ROLE}`` modifier."""
        if self.audience is ContextAudience.ROLE and self.modifier is not None:
            return self.modifier[len(MODIFIER_ROLE_PREFIX):]
        return None


class Addressed(Protocol):
    """Anything carrying activity addressing (ORM rows, schemas, plain objects)."""

    actor_id: str
    to: Sequence[str]
    cc: Sequence[str]


@dataclass(slots=True)
class AddressedActivity:
    """Minimal in-memory activity used for previews and ad-hoc checks."""

    actor_id: str
    to: list[str]
    cc: list[str] = field(default_factory=list)
    id: str | None = None
    type: str | None = None
    object: dict | None = None


@dataclass(frozen=True, slots=True)
class VisibilityResult:
    """Outcome of a visibility check with a human-readable reason."""

    visible: bool
    reason: str


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    """Outcome of a mention-aware delivery."""

    delivered: int
    mentioned: int


@dataclass(frozen=True, slots=True)
class DeliveryPreview:
    """Compose-time summary of who an activity would reach."""

    recipient_count: int
    has_public: bool
    has_followers: bool
    context_ids: list[str]
    direct_user_ids: list[str]


def all_addresses(activity: Addressed) -> list[str]:
    """Return ``to`` followed by ``cc``."""
    return [*activity.to, *activity.cc]
