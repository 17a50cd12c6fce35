"""Addressing system: parsing, visibility and delivery.

Use :func:`build_visibility_service` and :func:`build_delivery_service` to
wire the services against a database session and a plugin registry.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from kemotown.core.errors import AddressingError
from kemotown.plugins import PluginRegistry, PluginResolverBridge, PluginResolverError, build_default_registry
from kemotown.repositories import (
    ContextRepository,
    FollowRepository,
    InboxRepository,
    MembershipRepository,
    UserRepository,
)

from .delivery import DeliveryService, determine_category, extract_mentions
from .parser import (
    address_targets_context,
    address_targets_user,
    combine_addresses,
    context_address,
    context_admins_address,
    context_moderators_address,
    context_role_address,
    extract_context_ids,
    extract_user_ids,
    followers_address,
    is_followers_address,
    is_public_address,
    parse_address,
    public_address,
    user_address,
)
from .types import (
    AddressedActivity,
    AddressKind,
    ContextAudience,
    DeliveryPreview,
    DeliveryResult,
    ParsedAddress,
    VisibilityResult,
)
from .visibility import VisibilityService


def build_plugin_bridge(session: Session, registry: PluginRegistry | None = None) -> PluginResolverBridge:
    """Return a plugin bridge bound to ``session``."""
    return PluginResolverBridge(
        registry if registry is not None else build_default_registry(session),
        ContextRepository(session),
        MembershipRepository(session),
    )


def build_visibility_service(
    session: Session,
    registry: PluginRegistry | None = None,
) -> VisibilityService:
    """Return a visibility service bound to ``session``."""
    return VisibilityService(
        FollowRepository(session),
        MembershipRepository(session),
        build_plugin_bridge(session, registry),
    )


def build_delivery_service(
    session: Session,
    registry: PluginRegistry | None = None,
) -> DeliveryService:
    """Return a delivery service bound to ``session``."""
    return DeliveryService(
        FollowRepository(session),
        MembershipRepository(session),
        UserRepository(session),
        InboxRepository(session),
        build_plugin_bridge(session, registry),
    )


__all__ = [
    "AddressingError",
    "AddressKind",
    "AddressedActivity",
    "ContextAudience",
    "DeliveryPreview",
    "DeliveryResult",
    "DeliveryService",
    "ParsedAddress",
    "PluginResolverError",
    "VisibilityResult",
    "VisibilityService",
    "address_targets_context",
    "address_targets_user",
    "build_delivery_service",
    "build_plugin_bridge",
    "build_visibility_service",
    "combine_addresses",
    "context_address",
    "context_admins_address",
    "context_moderators_address",
    "context_role_address",
    "determine_category",
    "extract_context_ids",
    "extract_mentions",
    "extract_user_ids",
    "followers_address",
    "is_followers_address",
    "is_public_address",
    "parse_address",
    "public_address",
    "user_address",
]
