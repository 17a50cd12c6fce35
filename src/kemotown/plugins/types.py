"""Plugin definition types.

Plugins extend contexts (groups, events, conventions) with custom activity
types, permissions and address patterns. Address patterns are the part the
addressing subsystem consumes: each one names a ``context:{id}:<suffix>``
audience and supplies a per-user predicate for it.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

PATTERN_PREFIX = "context:{id}:"

ResolverFn = Callable[[str, str], Awaitable[bool]]


@runtime_checkable
class AddressPatternResolver(Protocol):
    """Capability a plugin exposes for one custom context audience."""

    pattern: str
    label: str

    async def resolve(self, context_id: str, user_id: str) -> bool:
        """Return True when ``user_id`` belongs to this audience of ``context_id``."""
        ...


def pattern_suffix(pattern: str) -> str:
    """Return the modifier a pattern declares, e.g. ``attendees``."""
    return pattern.removeprefix(PATTERN_PREFIX)


@dataclass(slots=True)
class AddressPattern:
    """Address pattern backed by a plain async callable."""

    pattern: str
    label: str
    resolver: ResolverFn

    async def resolve(self, context_id: str, user_id: str) -> bool:
        return bool(await self.resolver(context_id, user_id))


@dataclass(frozen=True, slots=True)
class PluginActivityType:
    """Custom activity verb contributed by a plugin."""

    type: str
    label: str
    icon: str
    description: str | None = None


@dataclass(frozen=True, slots=True)
class PluginPermission:
    """Permission a plugin defines, granted by default to ``default_roles``."""

    id: str
    name: str
    description: str
    default_roles: tuple[str, ...]


@dataclass(slots=True)
class Plugin:
    """Plugin definition as stored in the registry."""

    id: str
    name: str
    description: str
    version: str
    context_types: tuple[str, ...]
    activity_types: list[PluginActivityType] = field(default_factory=list)
    address_patterns: list[AddressPatternResolver] = field(default_factory=list)
    permissions: list[PluginPermission] = field(default_factory=list)
