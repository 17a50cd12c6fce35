"""Data access helpers for follow relationships."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from kemotown.models.follow import Follow, FollowStatus

__all__ = ["FollowRepository"]


class FollowRepository:
    """Thin wrapper around database access for follow edges."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get(self, follower_id: str, following_id: str) -> Follow | None:
        """Return the follow edge between two users, whatever its status."""
        result = self.session.execute(
            select(Follow).where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
            )
        )
        return result.scalars().first()

    def is_following(self, follower_id: str, following_id: str) -> bool:
        """Return True when the follow exists and has been accepted."""
        follow = self.get(follower_id, following_id)
        return follow is not None and follow.status == FollowStatus.ACCEPTED

    def list_accepted_follower_ids(self, user_id: str) -> list[str]:
        """Return ids of every user with an accepted follow of ``user_id``."""
        result = self.session.execute(
            select(Follow.follower_id).where(
                Follow.following_id == user_id,
                Follow.status == FollowStatus.ACCEPTED,
            )
        )
        return list(result.scalars())

    def accepted_following_among(self, follower_id: str, user_ids: Iterable[str]) -> set[str]:
        """Return the subset of ``user_ids`` that ``follower_id`` follows (accepted)."""
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return set()
        result = self.session.execute(
            select(Follow.following_id).where(
                Follow.follower_id == follower_id,
                Follow.following_id.in_(ids),
                Follow.status == FollowStatus.ACCEPTED,
            )
        )
        return set(result.scalars())

    def upsert(self, follower_id: str, following_id: str, status: str) -> Follow:
        """Create the follow edge or move an existing one to ``status``."""
        follow = self.get(follower_id, following_id)
        if follow is None:
            follow = Follow(follower_id=follower_id, following_id=following_id, status=status)
            self.session.add(follow)
        else:
            follow.status = status
        self.session.flush()
        return follow
