"""Convention plugin: staff, on-site attendees and dealers."""

from __future__ import annotations

from kemotown.models.context import ContextType, MemberRole
from kemotown.repositories.membership_repo import MembershipRepository

from .types import AddressPattern, Plugin, PluginActivityType, PluginPermission, ResolverFn

PLUGIN_ID = "convention"


def build_convention_plugin(memberships: MembershipRepository) -> Plugin:
    """Build the convention plugin bound to a membership repository."""

    def flag_resolver(flag: str) -> ResolverFn:
        async def resolve(context_id: str, user_id: str) -> bool:
            membership = memberships.get_approved(context_id, user_id)
            if membership is None:
                return False
            convention_data = (membership.plugin_data or {}).get(PLUGIN_ID) or {}
            return convention_data.get(flag) is True

        return resolve

    return Plugin(
        id=PLUGIN_ID,
        name="Convention",
        description="Multi-day conventions with schedules and dealers",
        version="1.0.0",
        context_types=(ContextType.CONVENTION,),
        activity_types=[
            PluginActivityType(type="CHECKIN", label="Arrived", icon="map-pin"),
        ],
        address_patterns=[
            AddressPattern(
                pattern="context:{id}:staff",
                label="Convention Staff",
                resolver=flag_resolver("isStaff"),
            ),
            AddressPattern(
                pattern="context:{id}:here",
                label="Currently Here",
                resolver=flag_resolver("isHereNow"),
            ),
            AddressPattern(
                pattern="context:{id}:dealers",
                label="Dealers",
                resolver=flag_resolver("isDealer"),
            ),
        ],
        permissions=[
            PluginPermission(
                id="manage_schedule",
                name="Manage Schedule",
                description="Edit panels and schedule entries",
                default_roles=(MemberRole.OWNER, MemberRole.ADMIN),
            ),
        ],
    )
