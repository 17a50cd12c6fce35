"""Group plugin: staff and recently active member audiences."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from kemotown.db.time import utcnow
from kemotown.models.context import ContextType, MemberRole
from kemotown.repositories.membership_repo import MembershipRepository

from .types import AddressPattern, Plugin, PluginActivityType, PluginPermission

PLUGIN_ID = "group"
ACTIVE_WINDOW = timedelta(days=30)
STAFF_ROLES = frozenset(
    {MemberRole.OWNER.value, MemberRole.ADMIN.value, MemberRole.MODERATOR.value}
)


def _parse_timestamp(value: object) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def build_group_plugin(memberships: MembershipRepository) -> Plugin:
    """Build the group plugin bound to a membership repository."""

    async def is_staff(context_id: str, user_id: str) -> bool:
        membership = memberships.get_approved(context_id, user_id)
        return membership is not None and membership.role in STAFF_ROLES

    async def is_active(context_id: str, user_id: str) -> bool:
        membership = memberships.get_approved(context_id, user_id)
        if membership is None:
            return False
        group_data = (membership.plugin_data or {}).get(PLUGIN_ID) or {}
        last_post_at = _parse_timestamp(group_data.get("lastPostAt"))
        if last_post_at is None:
            return False
        return last_post_at >= utcnow() - ACTIVE_WINDOW

    return Plugin(
        id=PLUGIN_ID,
        name="Group",
        description="Community groups with rules, staff and polls",
        version="1.0.0",
        context_types=(ContextType.GROUP,),
        activity_types=[
            PluginActivityType(type="JOIN", label="Joined", icon="user-plus"),
            PluginActivityType(type="LEAVE", label="Left", icon="user-minus"),
            PluginActivityType(type="INVITE", label="Invited", icon="mail"),
        ],
        address_patterns=[
            AddressPattern(pattern="context:{id}:staff", label="Group Staff", resolver=is_staff),
            AddressPattern(pattern="context:{id}:active", label="Active Members", resolver=is_active),
        ],
        permissions=[
            PluginPermission(
                id="post_announcement",
                name="Post Announcements",
                description="Create announcements that notify all members",
                default_roles=(MemberRole.OWNER, MemberRole.ADMIN),
            ),
            PluginPermission(
                id="manage_members",
                name="Manage Members",
                description="Approve, ban or change roles of members",
                default_roles=(MemberRole.OWNER, MemberRole.ADMIN, MemberRole.MODERATOR),
            ),
        ],
    )
