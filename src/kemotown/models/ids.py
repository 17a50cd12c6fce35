"""Identifier helpers for ORM primary keys."""

import uuid


def new_id() -> str:
    """Return a new opaque string identifier."""
    return uuid.uuid4().hex
