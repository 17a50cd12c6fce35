"""Delivery of activities into recipient inboxes.

Recipients are resolved from ``to`` and ``cc`` with the same audience rules
the visibility checks use, de-duplicated, stripped of the actor and of ids
with no user account, and written as one batched insert that skips existing
``(user_id, activity_id)`` rows.
``public`` never produces inbox rows; public timelines are queried instead.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from typing import Any, Protocol

from kemotown.core.settings import settings
from kemotown.db.time import utcnow
from kemotown.models.activity import ActivityType
from kemotown.models.inbox import InboxCategory
from kemotown.plugins.bridge import PluginResolverBridge
from kemotown.repositories.follow_repo import FollowRepository
from kemotown.repositories.inbox_repo import InboxRepository
from kemotown.repositories.membership_repo import MembershipRepository
from kemotown.repositories.user_repo import UserRepository

from .audience import AudienceResolver
from .parser import extract_context_ids, extract_user_ids, parse_address, user_address
from .types import (
    FOLLOWERS,
    PUBLIC,
    Addressed,
    AddressedActivity,
    DeliveryPreview,
    DeliveryResult,
    all_addresses,
)

logger = logging.getLogger(__name__)

MENTION_PATTERN = re.compile(r"@([a-zA-Z0-9_]+)")

CATEGORY_BY_TYPE: dict[str, InboxCategory] = {
    ActivityType.LIKE: InboxCategory.LIKE,
    ActivityType.ANNOUNCE: InboxCategory.REPOST,
    ActivityType.FOLLOW: InboxCategory.FOLLOW,
    ActivityType.ACCEPT: InboxCategory.FOLLOW,
    # Direct messages are told apart by the caller.
    ActivityType.CREATE: InboxCategory.REPLY,
    ActivityType.RSVP: InboxCategory.EVENT,
    ActivityType.CHECKIN: InboxCategory.EVENT,
    ActivityType.JOIN: InboxCategory.GROUP,
    ActivityType.LEAVE: InboxCategory.GROUP,
    ActivityType.INVITE: InboxCategory.GROUP,
    ActivityType.FLAG: InboxCategory.SYSTEM,
    ActivityType.BLOCK: InboxCategory.SYSTEM,
}


class DeliverableActivity(Addressed, Protocol):
    """An addressed activity that already has an id and a type."""

    id: str
    type: str


def determine_category(activity_type: str) -> InboxCategory:
    """Map an activity type to the inbox category it is delivered under."""
    return CATEGORY_BY_TYPE.get(str(activity_type), InboxCategory.DEFAULT)


def extract_mentions(payload: Any) -> list[str]:
    """Return usernames mentioned by an activity payload.

    An explicit ``mentions`` list wins; otherwise ``@username`` tokens are
    scanned out of ``content``.
    """
    if not isinstance(payload, dict):
        return []

    mentions = payload.get("mentions")
    if isinstance(mentions, list):
        return [name for name in mentions if isinstance(name, str)]

    content = payload.get("content")
    if isinstance(content, str):
        return MENTION_PATTERN.findall(content)

    return []


class DeliveryService:
    """Fan activities out into inboxes and manage inbox read state."""

    def __init__(
        self,
        follows: FollowRepository,
        memberships: MembershipRepository,
        users: UserRepository,
        inbox: InboxRepository,
        plugins: PluginResolverBridge,
    ) -> None:
        self.users = users
        self.inbox = inbox
        self.audience = AudienceResolver(follows, memberships, plugins)

    async def resolve_recipients(self, activity: Addressed) -> set[str]:
        """Return the union of every address audience; the actor is not removed here."""
        recipients: set[str] = set()
        for raw in all_addresses(activity):
            recipients |= await self.audience.enumerate(parse_address(raw), activity.actor_id)
        return recipients

    async def _recipients_without_actor(self, activity: Addressed) -> set[str]:
        recipients = await self.resolve_recipients(activity)
        recipients.discard(activity.actor_id)
        if not recipients:
            return recipients
        # Direct addresses may name users that do not exist.
        return self.users.existing_ids(recipients)

    def _rows(
        self,
        activity_id: str,
        user_ids: Iterable[str],
        category: str,
        priority: int,
    ) -> list[dict[str, Any]]:
        return [
            {
                "user_id": user_id,
                "activity_id": activity_id,
                "category": category,
                "priority": priority,
            }
            for user_id in sorted(user_ids)
        ]

    async def deliver(self, activity: DeliverableActivity) -> int:
        """Deliver ``activity`` to every resolved recipient except its actor.

        Returns:
            Number of recipients. Rows that already exist are skipped, so
            delivering the same activity twice is harmless.
        """
        recipients = await self._recipients_without_actor(activity)
        if not recipients:
            return 0

        category = determine_category(activity.type)
        self.inbox.create_many_skip_duplicates(
            self._rows(activity.id, recipients, category, settings.default_inbox_priority)
        )
        logger.debug(
            "Delivered activity %s (%s) to %d recipients as %s",
            activity.id,
            activity.type,
            len(recipients),
            category,
        )
        return len(recipients)

    async def deliver_with_mentions(self, activity: DeliverableActivity) -> DeliveryResult:
        """Deliver to the addressed audience plus every mentioned user.

        Mentioned users are added as ``user:{id}`` cc addresses. Their inbox
        row is written first, as a MENTION at the mention priority; the rest of
        the audience is then delivered under the activity's usual category.
        One row per user keeps the ``(user_id, activity_id)`` pair unique.
        Unknown usernames are dropped and the actor never gets a row.
        """
        usernames = extract_mentions(getattr(activity, "object", None))
        mentioned_ids = self.users.ids_for_usernames(usernames)

        enhanced = AddressedActivity(
            id=activity.id,
            type=activity.type,
            actor_id=activity.actor_id,
            to=list(activity.to),
            cc=[*activity.cc, *(user_address(user_id) for user_id in mentioned_ids)],
        )
        recipients = await self._recipients_without_actor(enhanced)
        mention_recipients = {user_id for user_id in mentioned_ids if user_id != activity.actor_id}

        if mention_recipients:
            self.inbox.create_many_skip_duplicates(
                self._rows(
                    activity.id,
                    mention_recipients,
                    InboxCategory.MENTION,
                    settings.mention_priority,
                )
            )

        others = recipients - mention_recipients
        if others:
            self.inbox.create_many_skip_duplicates(
                self._rows(
                    activity.id,
                    others,
                    determine_category(activity.type),
                    settings.default_inbox_priority,
                )
            )

        logger.debug(
            "Delivered activity %s to %d recipients, %d by mention",
            activity.id,
            len(recipients),
            len(mention_recipients),
        )
        return DeliveryResult(delivered=len(recipients), mentioned=len(mention_recipients))

    async def preview_delivery(self, activity: Addressed) -> DeliveryPreview:
        """Summarize who an activity would reach without writing anything."""
        addresses = all_addresses(activity)
        recipients = await self._recipients_without_actor(activity)
        return DeliveryPreview(
            recipient_count=len(recipients),
            has_public=PUBLIC in addresses,
            has_followers=FOLLOWERS in addresses,
            context_ids=extract_context_ids(addresses),
            direct_user_ids=extract_user_ids(addresses),
        )

    async def batch_deliver(self, activities: Sequence[DeliverableActivity]) -> int:
        """Deliver several activities with a single combined insert.

        Each activity keeps its own recipients and category.
        """
        rows: list[dict[str, Any]] = []
        for activity in activities:
            recipients = await self._recipients_without_actor(activity)
            rows.extend(
                self._rows(
                    activity.id,
                    recipients,
                    determine_category(activity.type),
                    settings.default_inbox_priority,
                )
            )

        if not rows:
            return 0

        self.inbox.create_many_skip_duplicates(rows)
        logger.debug("Batch delivered %d activities as %d inbox rows", len(activities), len(rows))
        return len(rows)

    def delete_delivery(self, activity_id: str) -> int:
        """Remove every inbox row for ``activity_id``; returns the number removed."""
        return self.inbox.delete_for_activity(activity_id)

    def mark_read(self, activity_id: str, user_id: str) -> bool:
        """Mark one user's delivery of an activity as read; False when none exists."""
        return self.inbox.mark_read(user_id, activity_id, utcnow()) > 0

    def mark_all_read(self, user_id: str, category: str | Iterable[str] | None = None) -> int:
        """Mark every unread item for ``user_id`` as read, optionally by category."""
        if category is None:
            categories = None
        elif isinstance(category, str):
            categories = [category]
        else:
            categories = list(category)
        return self.inbox.mark_all_read(user_id, utcnow(), categories)

    def update_priority(self, activity_id: str, priority: int, category: str | None = None) -> int:
        """Set the priority of an activity's inbox rows, optionally for one category."""
        return self.inbox.update_priority(activity_id, priority, category)
