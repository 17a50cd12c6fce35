"""Service-level helpers for creating, reading and deleting activities.

Every write delivers through :class:`~kemotown.addressing.DeliveryService`
and every read passes through :class:`~kemotown.addressing.VisibilityService`.
Services flush; committing is left to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy.orm import Session

from kemotown.addressing import (
    AddressedActivity,
    DeliveryPreview,
    DeliveryService,
    VisibilityService,
    build_delivery_service,
    build_visibility_service,
    context_address,
    user_address,
)
from kemotown.addressing.types import PUBLIC
from kemotown.core.settings import settings
from kemotown.models.activity import Activity, ActivityType
from kemotown.models.context import ContextVisibility
from kemotown.models.follow import FollowStatus
from kemotown.plugins import PluginRegistry
from kemotown.repositories import (
    ActivityRepository,
    ContextRepository,
    FollowRepository,
    UserRepository,
)
from kemotown.schemas.activity import AnnounceCreate, NoteCreate

logger = logging.getLogger(__name__)

# Restricted activities are dropped after fetching, so fetch extra candidates.
TIMELINE_OVERFETCH = 3


class ActivityNotFoundError(LookupError):
    """Raised when an activity or user does not exist or is not visible."""


class ActivityPermissionError(PermissionError):
    """Raised when the caller may not act on an activity."""


class ActivityConflictError(ValueError):
    """Raised for duplicate likes, reposts or self-follows."""


class ActivityService:
    """Create and read activities with delivery and visibility applied."""

    def __init__(
        self,
        session: Session,
        *,
        registry: PluginRegistry | None = None,
        visibility: VisibilityService | None = None,
        delivery: DeliveryService | None = None,
    ) -> None:
        self.session = session
        self.activities = ActivityRepository(session)
        self.contexts = ContextRepository(session)
        self.follows = FollowRepository(session)
        self.users = UserRepository(session)
        self.visibility = visibility or build_visibility_service(session, registry)
        self.delivery = delivery or build_delivery_service(session, registry)

    def _require_target(self, activity_id: str) -> Activity:
        target = self.activities.get_by_id(activity_id)
        if target is None:
            raise ActivityNotFoundError("Activity not found")
        return target

    async def create_note(self, actor_id: str, data: NoteCreate) -> Activity:
        """Create a note and deliver it, mentions included.

        A note posted into a context is addressed to that context. Notes in
        public contexts are also made public.
        """
        to = list(data.to)
        cc = list(data.cc)

        if data.context_id:
            context = self.contexts.get_by_id(data.context_id)
            if context is None:
                raise ActivityNotFoundError("Context not found")

            if context.visibility == ContextVisibility.PUBLIC and PUBLIC not in to:
                to.append(PUBLIC)

            address = context_address(data.context_id)
            if address not in to and address not in cc:
                (cc if PUBLIC in to else to).append(address)

        payload: dict[str, object] = {
            "content": data.content,
            "summary": data.summary,
            "sensitive": data.sensitive,
        }
        if data.mentions is not None:
            payload["mentions"] = list(data.mentions)

        activity = self.activities.create(
            type=ActivityType.CREATE,
            actor_id=actor_id,
            to=to,
            cc=cc,
            object_type="NOTE",
            object=payload,
            context_id=data.context_id,
            in_reply_to=data.in_reply_to,
        )
        result = await self.delivery.deliver_with_mentions(activity)
        logger.info(
            "Note %s by %s delivered to %d recipients (%d mentioned)",
            activity.id,
            actor_id,
            result.delivered,
            result.mentioned,
        )
        return activity

    async def create_like(self, actor_id: str, target_activity_id: str) -> Activity:
        """Like an activity the actor can see; delivered to the target's author."""
        target = self._require_target(target_activity_id)
        if not await self.visibility.can_see(target, actor_id):
            raise ActivityPermissionError("You cannot react to this activity")
        if self.activities.find_live(ActivityType.LIKE, actor_id, target.id) is not None:
            raise ActivityConflictError("Already liked")

        activity = self.activities.create(
            type=ActivityType.LIKE,
            actor_id=actor_id,
            to=[user_address(target.actor_id)],
            object_type="ACTIVITY",
            object_id=target.id,
        )
        await self.delivery.deliver(activity)
        return activity

    async def create_announce(
        self,
        actor_id: str,
        target_activity_id: str,
        data: AnnounceCreate | None = None,
    ) -> Activity:
        """Repost a public activity to the actor's chosen audience."""
        data = data or AnnounceCreate()
        target = self._require_target(target_activity_id)
        if PUBLIC not in target.to:
            raise ActivityPermissionError("Cannot repost non-public activities")
        if self.activities.find_live(ActivityType.ANNOUNCE, actor_id, target.id) is not None:
            raise ActivityConflictError("Already reposted")

        cc = list(data.cc)
        author = user_address(target.actor_id)
        if target.actor_id != actor_id and author not in data.to and author not in cc:
            cc.append(author)

        activity = self.activities.create(
            type=ActivityType.ANNOUNCE,
            actor_id=actor_id,
            to=list(data.to),
            cc=cc,
            object_type="ACTIVITY",
            object_id=target.id,
        )
        await self.delivery.deliver(activity)
        return activity

    async def follow(self, actor_id: str, target_user_id: str) -> Activity:
        """Follow another user and notify them with a FOLLOW activity."""
        if actor_id == target_user_id:
            raise ActivityConflictError("You cannot follow yourself")
        if self.users.get_by_id(target_user_id) is None:
            raise ActivityNotFoundError("User not found")
        if self.follows.is_following(actor_id, target_user_id):
            raise ActivityConflictError("Already following")

        self.follows.upsert(actor_id, target_user_id, FollowStatus.ACCEPTED)
        activity = self.activities.create(
            type=ActivityType.FOLLOW,
            actor_id=actor_id,
            to=[user_address(target_user_id)],
            object_type="USER",
            object_id=target_user_id,
        )
        await self.delivery.deliver(activity)
        return activity

    async def delete_activity(self, actor_id: str, activity_id: str) -> int:
        """Soft-delete the actor's own activity and remove its inbox rows."""
        activity = self.activities.get_by_id(activity_id)
        if activity is None:
            raise ActivityNotFoundError("Activity not found")
        if activity.actor_id != actor_id:
            raise ActivityPermissionError("You can only delete your own activities")

        self.activities.soft_delete(activity)
        removed = self.delivery.delete_delivery(activity.id)
        logger.info("Deleted activity %s and %d inbox rows", activity.id, removed)
        return removed

    async def get_activity(self, activity_id: str, viewer_id: str | None) -> Activity | None:
        """Return the activity when it exists and ``viewer_id`` may see it."""
        activity = self.activities.get_by_id(activity_id)
        if activity is None:
            return None
        if not await self.visibility.can_see(activity, viewer_id):
            return None
        return activity

    async def public_timeline(self, limit: int | None = None, before: datetime | None = None) -> list[Activity]:
        """Return the newest public activities."""
        limit = limit or settings.timeline_page_size
        candidates = self.activities.list_recent(limit, public_only=True, before=before)
        return await self.visibility.filter_visible(candidates, None)

    async def home_timeline(
        self,
        viewer_id: str,
        limit: int | None = None,
        before: datetime | None = None,
    ) -> list[Activity]:
        """Return the newest activities ``viewer_id`` may see."""
        limit = limit or settings.timeline_page_size
        candidates = self.activities.list_recent(limit * TIMELINE_OVERFETCH, before=before)
        visible = await self.visibility.filter_visible(candidates, viewer_id)
        return visible[:limit]

    async def preview(self, actor_id: str, to: Sequence[str], cc: Sequence[str] = ()) -> DeliveryPreview:
        """Summarize who a not-yet-created activity would reach."""
        return await self.delivery.preview_delivery(
            AddressedActivity(actor_id=actor_id, to=list(to), cc=list(cc))
        )
