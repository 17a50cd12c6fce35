"""System and plugin introspection endpoints."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from kemotown.core.settings import settings
from kemotown.plugins import PluginRegistry

from ..dependencies import get_plugin_registry

router = APIRouter(prefix="/system", tags=["system"])

RegistryDep = Annotated[PluginRegistry, Depends(get_plugin_registry)]


@router.get("/config")
async def get_public_config() -> dict[str, Any]:
    """Return a sanitized snapshot of public runtime configuration."""
    return {
        "app": {"name": settings.app_name, "version": settings.app_version},
        "delivery": {
            "default_priority": settings.default_inbox_priority,
            "mention_priority": settings.mention_priority,
            "plugin_resolver_concurrency": settings.plugin_resolver_concurrency,
            "plugin_resolver_failure_policy": settings.plugin_resolver_failure_policy,
        },
    }


@router.get("/address-patterns")
async def list_address_patterns(registry: RegistryDep) -> list[dict[str, str]]:
    """List the context address patterns plugins contribute."""
    return [
        {
            "plugin_id": entry.plugin_id,
            "pattern": entry.pattern.pattern,
            "label": entry.pattern.label,
        }
        for entry in registry.all_address_patterns()
    ]


@router.get("/plugins")
async def list_plugins(registry: RegistryDep) -> list[dict[str, Any]]:
    """List enabled plugins with the activity types and audiences they add."""
    return [
        {
            "id": plugin.id,
            "name": plugin.name,
            "version": plugin.version,
            "context_types": [str(context_type) for context_type in plugin.context_types],
            "activity_types": [activity_type.type for activity_type in plugin.activity_types],
            "address_patterns": [pattern.pattern for pattern in plugin.address_patterns],
        }
        for plugin in registry.all()
    ]
