"""Registry of available plugins.

The registry is a plain object handed to the services that need it; build
one per request with :func:`kemotown.plugins.build_default_registry` or
assemble one by hand in tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .types import AddressPatternResolver, Plugin, PluginActivityType

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RegisteredAddressPattern:
    """An address pattern together with the plugin that declared it."""

    plugin_id: str
    pattern: AddressPatternResolver


@dataclass(frozen=True, slots=True)
class RegisteredActivityType:
    """An activity type together with the plugin that declared it."""

    plugin_id: str
    activity_type: PluginActivityType


class PluginRegistry:
    """Central lookup of plugins by id."""

    def __init__(self) -> None:
        self._plugins: dict[str, Plugin] = {}

    def register(self, plugin: Plugin) -> None:
        """Register a plugin, replacing any previous plugin with the same id."""
        if plugin.id in self._plugins:
            logger.warning("Plugin %r already registered, overwriting", plugin.id)
        self._plugins[plugin.id] = plugin

    def unregister(self, plugin_id: str) -> bool:
        """Remove a plugin; return False when it was not registered."""
        return self._plugins.pop(plugin_id, None) is not None

    def get(self, plugin_id: str) -> Plugin | None:
        return self._plugins.get(plugin_id)

    def has(self, plugin_id: str) -> bool:
        return plugin_id in self._plugins

    def ids(self) -> list[str]:
        return list(self._plugins)

    def all(self) -> list[Plugin]:
        return list(self._plugins.values())

    def __len__(self) -> int:
        return len(self._plugins)

    def for_context_type(self, context_type: str) -> list[Plugin]:
        """Return plugins compatible with ``context_type``, in registration order."""
        return [p for p in self._plugins.values() if str(context_type) in p.context_types]

    def all_activity_types(self) -> list[RegisteredActivityType]:
        return [
            RegisteredActivityType(plugin_id=plugin.id, activity_type=activity_type)
            for plugin in self._plugins.values()
            for activity_type in plugin.activity_types
        ]

    def all_address_patterns(self) -> list[RegisteredAddressPattern]:
        return [
            RegisteredAddressPattern(plugin_id=plugin.id, pattern=pattern)
            for plugin in self._plugins.values()
            for pattern in plugin.address_patterns
        ]
