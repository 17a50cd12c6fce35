"""Event plugin: hosts, confirmed attendees and waitlist audiences."""

from __future__ import annotations

from kemotown.models.context import ContextType, MemberRole, Membership
from kemotown.repositories.membership_repo import MembershipRepository

from .types import AddressPattern, Plugin, PluginActivityType, PluginPermission

PLUGIN_ID = "event"
HOST_ROLES = frozenset({MemberRole.OWNER.value, MemberRole.ADMIN.value})


def rsvp_status(membership: Membership | None) -> str | None:
    """Return the RSVP status stored in a membership's event plugin data."""
    if membership is None:
        return None
    event_data = (membership.plugin_data or {}).get(PLUGIN_ID) or {}
    status = event_data.get("rsvpStatus")
    return status if isinstance(status, str) else None


def build_event_plugin(memberships: MembershipRepository) -> Plugin:
    """Build the event plugin bound to a membership repository."""

    async def is_host(context_id: str, user_id: str) -> bool:
        membership = memberships.get_approved(context_id, user_id)
        return membership is not None and membership.role in HOST_ROLES

    async def is_attending(context_id: str, user_id: str) -> bool:
        return rsvp_status(memberships.get_approved(context_id, user_id)) == "attending"

    async def is_waitlisted(context_id: str, user_id: str) -> bool:
        return rsvp_status(memberships.get_approved(context_id, user_id)) == "waitlist"

    return Plugin(
        id=PLUGIN_ID,
        name="Event",
        description="Meetups with RSVPs, capacity and check-in",
        version="1.0.0",
        context_types=(ContextType.EVENT,),
        activity_types=[
            PluginActivityType(type="RSVP", label="RSVP", icon="calendar-check"),
            PluginActivityType(type="CHECKIN", label="Checked in", icon="map-pin"),
        ],
        address_patterns=[
            AddressPattern(pattern="context:{id}:hosts", label="Event Hosts", resolver=is_host),
            AddressPattern(
                pattern="context:{id}:attendees",
                label="Confirmed Attendees",
                resolver=is_attending,
            ),
            AddressPattern(pattern="context:{id}:waitlist", label="Waitlisted", resolver=is_waitlisted),
        ],
        permissions=[
            PluginPermission(
                id="manage_rsvps",
                name="Manage RSVPs",
                description="Approve, reject, or modify attendee RSVPs",
                default_roles=(MemberRole.OWNER, MemberRole.ADMIN),
            ),
            PluginPermission(
                id="send_updates",
                name="Send Updates",
                description="Post event updates to attendees",
                default_roles=(MemberRole.OWNER, MemberRole.ADMIN, MemberRole.MODERATOR),
            ),
            PluginPermission(
                id="check_in",
                name="Check In Attendees",
                description="Mark attendees as arrived at the event",
                default_roles=(MemberRole.OWNER, MemberRole.ADMIN, MemberRole.MODERATOR),
            ),
        ],
    )
