"""Context plugins and the resolver bridge used by addressing."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.orm import Session

from kemotown.core.settings import settings
from kemotown.repositories.membership_repo import MembershipRepository

from .bridge import PluginResolverBridge, PluginResolverError
from .convention import build_convention_plugin
from .event import build_event_plugin
from .group import build_group_plugin
from .registry import PluginRegistry
from .types import AddressPattern, AddressPatternResolver, Plugin

_BUILDERS = {
    "group": build_group_plugin,
    "event": build_event_plugin,
    "convention": build_convention_plugin,
}


def build_default_registry(session: Session, enabled: Iterable[str] | None = None) -> PluginRegistry:
    """Return a registry with the built-in plugins bound to ``session``."""
    memberships = MembershipRepository(session)
    registry = PluginRegistry()
    for plugin_id in enabled if enabled is not None else settings.enabled_plugins:
        builder = _BUILDERS.get(plugin_id)
        if builder is not None:
            registry.register(builder(memberships))
    return registry


__all__ = [
    "AddressPattern",
    "AddressPatternResolver",
    "Plugin",
    "PluginRegistry",
    "PluginResolverBridge",
    "PluginResolverError",
    "build_default_registry",
]
