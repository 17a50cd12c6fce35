# src/kemotown/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import activities_router, inbox_router, system_router

__all__ = [
    "activities_router",
    "inbox_router",
    "system_router",
]
