"""Data access helpers for user accounts."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from kemotown.models.user import User

__all__ = ["UserRepository"]


class UserRepository:
    """Thin wrapper around database access for users."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, user_id: str) -> User | None:
        """Return a user by identifier."""
        return self.session.get(User, user_id)

    def ids_for_usernames(self, usernames: Iterable[str]) -> list[str]:
        """Resolve usernames to ids; unknown usernames are dropped."""
        names = list(dict.fromkeys(usernames))
        if not names:
            return []
        result = self.session.execute(select(User.id, User.username).where(User.username.in_(names)))
        by_name = {username: user_id for user_id, username in result.all()}
        return [by_name[name] for name in names if name in by_name]

    def existing_ids(self, user_ids: Iterable[str]) -> set[str]:
        """Return the subset of ``user_ids`` that belong to existing users."""
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return set()
        result = self.session.execute(select(User.id).where(User.id.in_(ids)))
        return set(result.scalars())
