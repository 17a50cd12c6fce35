"""Visibility checks for addressed activities.

Rules are evaluated in a fixed order and the first match wins:

1. ``public`` anywhere in ``to``/``cc`` is visible to everyone.
2. Anonymous viewers see nothing else.
3. The actor always sees their own activity.
4. Otherwise the first address whose audience contains the viewer grants
   visibility (see :class:`kemotown.addressing.audience.AudienceResolver`).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TypeVar

from kemotown.plugins.bridge import PluginResolverBridge
from kemotown.repositories.follow_repo import FollowRepository
from kemotown.repositories.membership_repo import MembershipRepository

from .audience import AudienceResolver, PrefetchedViewerState, ViewerState
from .parser import extract_context_ids, parse_address
from .types import (
    PUBLIC,
    Addressed,
    AddressedActivity,
    AddressKind,
    ParsedAddress,
    VisibilityResult,
    all_addresses,
)

A = TypeVar("A", bound=Addressed)

REASON_PUBLIC = "Public activity"
REASON_AUTH_REQUIRED = "Authentication required for non-public activities"
REASON_OWNER = "Activity owner"
REASON_NO_MATCH = "No matching address found"


def _match_reason(address: ParsedAddress) -> str:
    if address.kind is AddressKind.USER:
        return "Direct recipient"
    if address.kind is AddressKind.FOLLOWERS:
        return "Following actor"
    if address.modifier:
        return f"Context member with modifier: {address.modifier}"
    return "Context member"


def has_public_address(activity: Addressed) -> bool:
    return PUBLIC in activity.to or PUBLIC in activity.cc


class VisibilityService:
    """Decide whether viewers may see activities."""

    def __init__(
        self,
        follows: FollowRepository,
        memberships: MembershipRepository,
        plugins: PluginResolverBridge,
    ) -> None:
        self.follows = follows
        self.memberships = memberships
        self.audience = AudienceResolver(follows, memberships, plugins)

    async def _evaluate(
        self,
        activity: Addressed,
        viewer_id: str | None,
        state: ViewerState | None = None,
    ) -> VisibilityResult:
        if has_public_address(activity):
            return VisibilityResult(True, REASON_PUBLIC)

        if not viewer_id:
            return VisibilityResult(False, REASON_AUTH_REQUIRED)

        if activity.actor_id == viewer_id:
            return VisibilityResult(True, REASON_OWNER)

        viewer = state or self.audience.viewer(viewer_id)
        for raw in all_addresses(activity):
            address = parse_address(raw)
            if await self.audience.matches(address, activity.actor_id, viewer):
                return VisibilityResult(True, _match_reason(address))

        return VisibilityResult(False, REASON_NO_MATCH)

    async def can_see_with_reason(self, activity: Addressed, viewer_id: str | None) -> VisibilityResult:
        """Return the visibility decision together with the rule that produced it."""
        return await self._evaluate(activity, viewer_id)

    async def can_see(self, activity: Addressed, viewer_id: str | None) -> bool:
        """Return True when ``viewer_id`` may see ``activity``."""
        result = await self._evaluate(activity, viewer_id)
        return result.visible

    async def any_address_visible(
        self,
        addresses: Sequence[str],
        viewer_id: str | None,
        actor_id: str,
    ) -> bool:
        """Return whether an activity by ``actor_id`` with ``addresses`` would be visible."""
        return await self.can_see(AddressedActivity(actor_id=actor_id, to=list(addresses)), viewer_id)

    async def filter_visible(self, activities: Sequence[A], viewer_id: str | None) -> list[A]:
        """Return the activities ``viewer_id`` may see, keeping their order.

        Public activities are kept without any lookups. Anonymous viewers get
        only those. For a signed-in viewer the follow state of every distinct
        actor and the memberships of every referenced context are loaded in two
        batched queries before the remaining activities are checked.
        """
        if not activities:
            return []

        public_flags = [has_public_address(activity) for activity in activities]
        if not viewer_id:
            return [activity for activity, public in zip(activities, public_flags) if public]

        restricted = [activity for activity, public in zip(activities, public_flags) if not public]
        if not restricted:
            return list(activities)

        state = PrefetchedViewerState(
            viewer_id,
            following=self.batch_check_following(viewer_id, (a.actor_id for a in restricted)),
            roles=self.batch_check_membership(
                viewer_id,
                extract_context_ids(raw for a in restricted for raw in all_addresses(a)),
            ),
        )

        visible_ids: set[int] = set()
        for activity in restricted:
            result = await self._evaluate(activity, viewer_id, state)
            if result.visible:
                visible_ids.add(id(activity))

        return [
            activity
            for activity, public in zip(activities, public_flags)
            if public or id(activity) in visible_ids
        ]

    def batch_check_following(self, viewer_id: str, actor_ids: Iterable[str]) -> set[str]:
        """Return the actors ``viewer_id`` follows with an accepted follow."""
        return self.follows.accepted_following_among(viewer_id, actor_ids)

    def batch_check_membership(self, user_id: str, context_ids: Iterable[str]) -> dict[str, str]:
        """Map each context ``user_id`` is an approved member of to their role."""
        return self.memberships.approved_roles_for_user(user_id, context_ids)
