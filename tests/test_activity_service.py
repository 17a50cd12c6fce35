"""Tests for the activity service flows."""

from __future__ import annotations

import pytest
from sqlalchemy import select

from kemotown.models import ActivityType, ContextVisibility, InboxCategory, InboxItem
from kemotown.schemas.activity import AnnounceCreate, NoteCreate
from kemotown.services import (
    ActivityConflictError,
    ActivityNotFoundError,
    ActivityPermissionError,
    ActivityService,
)


@pytest.fixture()
def service(db_session) -> ActivityService:
    return ActivityService(db_session)


def inbox_for(db_session, user_id: str) -> list[InboxItem]:
    db_session.expire_all()
    return list(db_session.execute(select(InboxItem).where(InboxItem.user_id == user_id)).scalars())


@pytest.mark.asyncio
async def test_create_note_delivers_to_followers_and_mentions(
    service, db_session, follow, alice, bob, carol
) -> None:
    follow(bob, alice)

    activity = await service.create_note(
        alice.id,
        NoteCreate(content="hi @carol", to=["followers"]),
    )

    assert activity.type == ActivityType.CREATE
    assert activity.is_public is False
    assert activity.object["content"] == "hi @carol"
    assert [item.category for item in inbox_for(db_session, bob.id)] == [InboxCategory.REPLY.value]
    assert [item.category for item in inbox_for(db_session, carol.id)] == [InboxCategory.MENTION.value]


@pytest.mark.asyncio
async def test_note_in_public_context_is_public(service, make_context, join, db_session, alice, bob) -> None:
    context = make_context(visibility=ContextVisibility.PUBLIC)
    join(context, bob)

    activity = await service.create_note(
        alice.id,
        NoteCreate(content="welcome", to=["followers"], context_id=context.id),
    )

    assert activity.to == ["followers", "public"]
    assert activity.cc == [f"context:{context.id}"]
    assert activity.is_public is True
    assert len(inbox_for(db_session, bob.id)) == 1


@pytest.mark.asyncio
async def test_note_in_private_context_addressed_to_members(service, make_context, join, alice, bob, carol) -> None:
    context = make_context(visibility=ContextVisibility.PRIVATE)
    join(context, bob)

    activity = await service.create_note(
        alice.id,
        NoteCreate(content="members only", to=["followers"], context_id=context.id),
    )

    assert activity.to == ["followers", f"context:{context.id}"]
    assert await service.get_activity(activity.id, bob.id) is activity
    assert await service.get_activity(activity.id, carol.id) is None
    assert await service.get_activity(activity.id, None) is None


@pytest.mark.asyncio
async def test_note_in_missing_context(service, alice) -> None:
    with pytest.raises(ActivityNotFoundError):
        await service.create_note(alice.id, NoteCreate(content="x", to=["public"], context_id="nope"))


@pytest.mark.asyncio
async def test_like_requires_visibility_and_is_unique(service, db_session, alice, bob, carol) -> None:
    private = await service.create_note(alice.id, NoteCreate(content="secret", to=[f"user:{bob.id}"]))

    with pytest.raises(ActivityPermissionError):
        await service.create_like(carol.id, private.id)

    like = await service.create_like(bob.id, private.id)
    assert like.to == [f"user:{alice.id}"]
    assert [item.category for item in inbox_for(db_session, alice.id)] == [InboxCategory.LIKE.value]

    with pytest.raises(ActivityConflictError):
        await service.create_like(bob.id, private.id)

    with pytest.raises(ActivityNotFoundError):
        await service.create_like(bob.id, "missing")


@pytest.mark.asyncio
async def test_announce_only_public(service, db_session, follow, alice, bob, carol) -> None:
    follow(carol, bob)
    public = await service.create_note(alice.id, NoteCreate(content="hello", to=["public"]))
    restricted = await service.create_note(alice.id, NoteCreate(content="hello", to=["followers"]))

    with pytest.raises(ActivityPermissionError):
        await service.create_announce(bob.id, restricted.id)

    announce = await service.create_announce(bob.id, public.id)
    assert announce.to == ["public"]
    assert announce.cc == ["followers", f"user:{alice.id}"]
    assert [item.category for item in inbox_for(db_session, alice.id)] == [InboxCategory.REPOST.value]
    assert [item.category for item in inbox_for(db_session, carol.id)] == [InboxCategory.REPOST.value]

    with pytest.raises(ActivityConflictError):
        await service.create_announce(bob.id, public.id, AnnounceCreate(to=["followers"], cc=[]))


@pytest.mark.asyncio
async def test_follow(service, db_session, alice, bob) -> None:
    activity = await service.follow(alice.id, bob.id)

    assert activity.type == ActivityType.FOLLOW
    assert service.follows.is_following(alice.id, bob.id)
    assert [item.category for item in inbox_for(db_session, bob.id)] == [InboxCategory.FOLLOW.value]

    with pytest.raises(ActivityConflictError):
        await service.follow(alice.id, bob.id)
    with pytest.raises(ActivityConflictError):
        await service.follow(alice.id, alice.id)
    with pytest.raises(ActivityNotFoundError):
        await service.follow(alice.id, "nobody")


@pytest.mark.asyncio
async def test_delete_activity(service, db_session, alice, bob) -> None:
    activity = await service.create_note(alice.id, NoteCreate(content="oops", to=[f"user:{bob.id}"]))

    with pytest.raises(ActivityPermissionError):
        await service.delete_activity(bob.id, activity.id)

    assert await service.delete_activity(alice.id, activity.id) == 1
    assert inbox_for(db_session, bob.id) == []
    assert await service.get_activity(activity.id, alice.id) is None

    with pytest.raises(ActivityNotFoundError):
        await service.delete_activity(alice.id, activity.id)


@pytest.mark.asyncio
async def test_timelines(service, follow, alice, bob, carol) -> None:
    follow(bob, alice)
    public = await service.create_note(alice.id, NoteCreate(content="1", to=["public"]))
    followers = await service.create_note(alice.id, NoteCreate(content="2", to=["followers"]))
    direct = await service.create_note(carol.id, NoteCreate(content="3", to=[f"user:{alice.id}"]))

    public_ids = [a.id for a in await service.public_timeline()]
    assert public_ids == [public.id]

    home_ids = {a.id for a in await service.home_timeline(bob.id)}
    assert home_ids == {public.id, followers.id}
    assert direct.id not in home_ids

    assert len(await service.home_timeline(alice.id, limit=2)) == 2


@pytest.mark.asyncio
async def test_preview(service, follow, alice, bob) -> None:
    follow(bob, alice)
    preview = await service.preview(alice.id, ["public", "followers"])

    assert preview.recipient_count == 1
    assert preview.has_public is True
    assert preview.has_followers is True
