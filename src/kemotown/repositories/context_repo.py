"""Data access helpers for contexts."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from kemotown.models.context import Context

__all__ = ["ContextRepository"]


class ContextRepository:
    """Thin wrapper around database access for contexts."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, context_id: str) -> Context | None:
        """Return a context by identifier."""
        return self.session.get(Context, context_id)

    def get_features(self, context_id: str) -> list[str] | None:
        """Return the ordered feature list, or None when the context is missing."""
        result = self.session.execute(select(Context.features).where(Context.id == context_id))
        features = result.scalars().first()
        if features is None:
            return None
        return list(features)
