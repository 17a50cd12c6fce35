# src/kemotown/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .activities import router as activities_router
from .inbox import router as inbox_router
from .system import router as system_router

__all__ = [
    "activities_router",
    "inbox_router",
    "system_router",
]
