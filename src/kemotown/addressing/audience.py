"""Audience matching shared by visibility checks and delivery fan-out.

Every address rule is defined once here and evaluated in one of two modes:

* ``matches`` tests whether a single viewer belongs to the address audience
  (used by :mod:`kemotown.addressing.visibility`);
* ``enumerate`` lists every user in the audience (used by
  :mod:`kemotown.addressing.delivery`).

Keeping both modes next to each other keeps the visibility and delivery
rules from drifting apart.
"""

from __future__ import annotations

from typing import Protocol

from kemotown.models.context import MemberRole
from kemotown.plugins.bridge import PluginResolverBridge
from kemotown.repositories.follow_repo import FollowRepository
from kemotown.repositories.membership_repo import MembershipRepository

from .types import AddressKind, ContextAudience, ParsedAddress

ADMIN_ROLES = frozenset({MemberRole.OWNER.value, MemberRole.ADMIN.value})
MODERATOR_ROLES = frozenset(
    {MemberRole.OWNER.value, MemberRole.ADMIN.value, MemberRole.MODERATOR.value}
)


def allowed_roles(address: ParsedAddress) -> frozenset[str] | None:
    """Return the roles a built-in context audience admits.

    ``None`` means any role. Plugin audiences are not role based and must be
    sent through the plugin bridge instead.
    """
    audience = address.audience
    if audience is ContextAudience.ALL:
        return None
    if audience is ContextAudience.ADMINS:
        return ADMIN_ROLES
    if audience is ContextAudience.MODERATORS:
        return MODERATOR_ROLES
    if audience is ContextAudience.ROLE:
        return frozenset({address.role or ""})
    raise ValueError(f"{address.raw!r} is not a built-in context audience")


class ViewerState(Protocol):
    """Follow and membership facts about one viewer."""

    viewer_id: str

    def follows(self, actor_id: str) -> bool:
        """Return True when the viewer has an accepted follow of ``actor_id``."""
        ...

    def approved_role(self, context_id: str) -> str | None:
        """Return the viewer's role when they are an approved member, else None."""
        ...


class LiveViewerState:
    """Viewer facts answered by point lookups against the store."""

    def __init__(
        self,
        viewer_id: str,
        follows: FollowRepository,
        memberships: MembershipRepository,
    ) -> None:
        self.viewer_id = viewer_id
        self._follows = follows
        self._memberships = memberships

    def follows(self, actor_id: str) -> bool:
        return self._follows.is_following(self.viewer_id, actor_id)

    def approved_role(self, context_id: str) -> str | None:
        membership = self._memberships.get_approved(context_id, self.viewer_id)
        return membership.role if membership is not None else None


class PrefetchedViewerState:
    """Viewer facts answered from maps loaded up front in batch."""

    def __init__(self, viewer_id: str, following: set[str], roles: dict[str, str]) -> None:
        self.viewer_id = viewer_id
        self._following = following
        self._roles = roles

    def follows(self, actor_id: str) -> bool:
        return actor_id in self._following

    def approved_role(self, context_id: str) -> str | None:
        return self._roles.get(context_id)


class AudienceResolver:
    """Evaluate parsed addresses against one viewer or enumerate their audience."""

    def __init__(
        self,
        follows: FollowRepository,
        memberships: MembershipRepository,
        plugins: PluginResolverBridge,
    ) -> None:
        self.follows = follows
        self.memberships = memberships
        self.plugins = plugins

    def viewer(self, viewer_id: str) -> LiveViewerState:
        """Return a viewer state backed by live lookups."""
        return LiveViewerState(viewer_id, self.follows, self.memberships)

    async def matches(self, address: ParsedAddress, actor_id: str, viewer: ViewerState) -> bool:
        """Return True when ``viewer`` belongs to the audience of ``address``.

        ``public`` is handled by the callers before per-address checks and is
        never matched here.
        """
        if address.kind is AddressKind.USER:
            return bool(address.id) and address.id == viewer.viewer_id

        if address.kind is AddressKind.FOLLOWERS:
            return viewer.follows(actor_id)

        if address.kind is AddressKind.CONTEXT and address.id:
            role = viewer.approved_role(address.id)
            if role is None:
                return False
            if address.audience is ContextAudience.PLUGIN:
                return await self.plugins.resolve(address.id, viewer.viewer_id, address.modifier or "")
            roles = allowed_roles(address)
            return roles is None or role in roles

        return False

    async def enumerate(self, address: ParsedAddress, actor_id: str) -> set[str]:
        """Return every user in the audience of ``address``.

        ``public`` contributes nobody: public timelines are queried, not pushed.
        """
        if address.kind is AddressKind.USER:
            return {address.id} if address.id else set()

        if address.kind is AddressKind.FOLLOWERS:
            return set(self.follows.list_accepted_follower_ids(actor_id))

        if address.kind is AddressKind.CONTEXT and address.id:
            if address.audience is ContextAudience.PLUGIN:
                return await self.plugins.resolve_all(address.id, address.modifier or "")
            return set(self.memberships.list_approved_user_ids(address.id, allowed_roles(address)))

        return set()
