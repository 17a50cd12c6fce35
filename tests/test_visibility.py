"""Tests for activity visibility rules."""

from __future__ import annotations

import pytest

from kemotown.addressing import AddressedActivity, build_visibility_service
from kemotown.models import ContextType, FollowStatus, MemberRole, MembershipStatus


@pytest.fixture()
def visibility(db_session):
    return build_visibility_service(db_session)


def note(actor, to, cc=None) -> AddressedActivity:
    return AddressedActivity(actor_id=actor.id, to=list(to), cc=list(cc or []))


@pytest.mark.asyncio
async def test_public_activity_visible_to_anonymous(visibility, alice) -> None:
    result = await visibility.can_see_with_reason(note(alice, ["followers"], ["public"]), None)
    assert result.visible is True
    assert result.reason == "Public activity"


@pytest.mark.asyncio
async def test_restricted_activity_hidden_from_anonymous(visibility, alice) -> None:
    result = await visibility.can_see_with_reason(note(alice, ["followers"]), None)
    assert result.visible is False
    assert result.reason == "Authentication required for non-public activities"


@pytest.mark.asyncio
async def test_actor_always_sees_own_activity(visibility, alice) -> None:
    result = await visibility.can_see_with_reason(note(alice, ["user:nobody"]), alice.id)
    assert result.visible is True
    assert result.reason == "Activity owner"


@pytest.mark.asyncio
async def test_direct_recipient(visibility, alice, bob, carol) -> None:
    activity = note(alice, [f"user:{bob.id}"])
    result = await visibility.can_see_with_reason(activity, bob.id)
    assert result.visible is True
    assert result.reason == "Direct recipient"
    assert await visibility.can_see(activity, carol.id) is False


@pytest.mark.asyncio
async def test_followers_requires_accepted_follow(visibility, follow, alice, bob, carol) -> None:
    follow(bob, alice)
    follow(carol, alice, FollowStatus.PENDING)
    activity = note(alice, ["followers"])

    result = await visibility.can_see_with_reason(activity, bob.id)
    assert result.visible is True
    assert result.reason == "Following actor"
    assert await visibility.can_see(activity, carol.id) is False


@pytest.mark.asyncio
async def test_context_requires_approved_membership(
    visibility, make_context, join, alice, bob, carol
) -> None:
    context = make_context()
    join(context, bob)
    join(context, carol, status=MembershipStatus.PENDING)
    activity = note(alice, [f"context:{context.id}"])

    result = await visibility.can_see_with_reason(activity, bob.id)
    assert result.visible is True
    assert result.reason == "Context member"
    assert await visibility.can_see(activity, carol.id) is False


@pytest.mark.asyncio
async def test_context_role_modifiers(visibility, make_context, join, make_user, alice) -> None:
    context = make_context()
    owner = make_user()
    admin = make_user()
    moderator = make_user()
    member = make_user()
    join(context, owner, role=MemberRole.OWNER)
    join(context, admin, role=MemberRole.ADMIN)
    join(context, moderator, role=MemberRole.MODERATOR)
    join(context, member)

    admins = note(alice, [f"context:{context.id}:admins"])
    moderators = note(alice, [f"context:{context.id}:moderators"])
    members_only = note(alice, [f"context:{context.id}:role:MEMBER"])

    assert [await visibility.can_see(admins, u.id) for u in (owner, admin, moderator, member)] == [
        True,
        True,
        False,
        False,
    ]
    assert [await visibility.can_see(moderators, u.id) for u in (owner, admin, moderator, member)] == [
        True,
        True,
        True,
        False,
    ]
    assert [await visibility.can_see(members_only, u.id) for u in (owner, member)] == [False, True]

    result = await visibility.can_see_with_reason(admins, admin.id)
    assert result.reason == "Context member with modifier: admins"


@pytest.mark.asyncio
async def test_plugin_modifier_uses_enabled_plugin(visibility, make_context, join, make_user, alice) -> None:
    event = make_context(type=ContextType.EVENT, features=["event"])
    attending = make_user()
    maybe = make_user()
    pending = make_user()
    join(event, attending, plugin_data={"event": {"rsvpStatus": "attending"}})
    join(event, maybe, plugin_data={"event": {"rsvpStatus": "maybe"}})
    join(
        event,
        pending,
        status=MembershipStatus.PENDING,
        plugin_data={"event": {"rsvpStatus": "attending"}},
    )
    activity = note(alice, [f"context:{event.id}:attendees"])

    result = await visibility.can_see_with_reason(activity, attending.id)
    assert result.visible is True
    assert result.reason == "Context member with modifier: attendees"
    assert await visibility.can_see(activity, maybe.id) is False
    assert await visibility.can_see(activity, pending.id) is False


@pytest.mark.asyncio
async def test_plugin_modifier_needs_feature_on_context(visibility, make_context, join, bob, alice) -> None:
    context = make_context(type=ContextType.EVENT, features=[])
    join(context, bob, plugin_data={"event": {"rsvpStatus": "attending"}})

    assert await visibility.can_see(note(alice, [f"context:{context.id}:attendees"]), bob.id) is False


@pytest.mark.asyncio
async def test_unknown_and_legacy_addresses_match_nobody(visibility, alice, bob) -> None:
    result = await visibility.can_see_with_reason(note(alice, ["event:123", "nonsense"]), bob.id)
    assert result.visible is False
    assert result.reason == "No matching address found"


@pytest.mark.asyncio
async def test_first_matching_address_gives_reason(visibility, follow, alice, bob) -> None:
    follow(bob, alice)
    result = await visibility.can_see_with_reason(note(alice, ["followers"], [f"user:{bob.id}"]), bob.id)
    assert result.reason == "Following actor"


@pytest.mark.asyncio
async def test_any_address_visible(visibility, alice, bob) -> None:
    assert await visibility.any_address_visible([f"user:{bob.id}"], bob.id, alice.id) is True
    assert await visibility.any_address_visible(["followers"], bob.id, alice.id) is False


@pytest.mark.asyncio
async def test_filter_visible_keeps_order(visibility, follow, make_context, join, alice, bob, carol) -> None:
    context = make_context()
    join(context, bob)
    follow(bob, alice)

    items = [
        note(alice, ["followers"]),
        note(carol, ["public"]),
        note(carol, ["followers"]),
        note(carol, [f"context:{context.id}"]),
        note(alice, [f"user:{carol.id}"]),
        note(carol, [f"user:{bob.id}"]),
    ]

    visible = await visibility.filter_visible(items, bob.id)
    assert visible == [items[0], items[1], items[3], items[5]]


@pytest.mark.asyncio
async def test_filter_visible_anonymous_gets_public_only(visibility, alice) -> None:
    items = [note(alice, ["followers"]), note(alice, ["public"]), note(alice, ["user:x"], ["public"])]
    assert await visibility.filter_visible(items, None) == [items[1], items[2]]
    assert await visibility.filter_visible([], None) == []


@pytest.mark.asyncio
async def test_filter_visible_matches_single_checks(
    visibility, follow, make_context, join, alice, bob, carol
) -> None:
    context = make_context()
    join(context, bob, role=MemberRole.ADMIN)
    follow(bob, carol)
    items = [
        note(alice, [f"context:{context.id}:admins"]),
        note(alice, [f"context:{context.id}:moderators"]),
        note(alice, [f"context:{context.id}:role:MEMBER"]),
        note(carol, ["followers"]),
        note(alice, ["followers"]),
    ]

    expected = [item for item in items if await visibility.can_see(item, bob.id)]
    assert await visibility.filter_visible(items, bob.id) == expected


def test_batch_helpers(visibility, follow, make_context, join, alice, bob, carol) -> None:
    follow(bob, alice)
    follow(bob, carol, FollowStatus.PENDING)
    first = make_context()
    second = make_context()
    join(first, bob, role=MemberRole.MODERATOR)
    join(second, bob, status=MembershipStatus.BANNED)

    assert visibility.batch_check_following(bob.id, [alice.id, carol.id]) == {alice.id}
    assert visibility.batch_check_membership(bob.id, [first.id, second.id]) == {
        first.id: MemberRole.MODERATOR.value
    }
    assert visibility.batch_check_following(bob.id, []) == set()
