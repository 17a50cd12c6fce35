"""Data access helpers for context memberships."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from kemotown.models.context import Membership, MembershipStatus

__all__ = ["MembershipRepository"]


class MembershipRepository:
    """Thin wrapper around database access for memberships."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get(self, context_id: str, user_id: str) -> Membership | None:
        """Return the membership of ``user_id`` in ``context_id`` if any."""
        result = self.session.execute(
            select(Membership).where(
                Membership.context_id == context_id,
                Membership.user_id == user_id,
            )
        )
        return result.scalars().first()

    def get_approved(self, context_id: str, user_id: str) -> Membership | None:
        """Return the membership only when its status is APPROVED."""
        membership = self.get(context_id, user_id)
        if membership is None or membership.status != MembershipStatus.APPROVED:
            return None
        return membership

    def list_approved_user_ids(
        self,
        context_id: str,
        roles: Iterable[str] | None = None,
    ) -> list[str]:
        """Return user ids of approved members, optionally restricted to ``roles``."""
        stmt = select(Membership.user_id).where(
            Membership.context_id == context_id,
            Membership.status == MembershipStatus.APPROVED,
        )
        if roles is not None:
            stmt = stmt.where(Membership.role.in_([str(role) for role in roles]))
        result = self.session.execute(stmt)
        return list(result.scalars())

    def approved_roles_for_user(self, user_id: str, context_ids: Iterable[str]) -> dict[str, str]:
        """Map each context id the user is an approved member of to their role."""
        ids = list(dict.fromkeys(context_ids))
        if not ids:
            return {}
        result = self.session.execute(
            select(Membership.context_id, Membership.role).where(
                Membership.user_id == user_id,
                Membership.context_id.in_(ids),
                Membership.status == MembershipStatus.APPROVED,
            )
        )
        return {context_id: role for context_id, role in result.all()}
