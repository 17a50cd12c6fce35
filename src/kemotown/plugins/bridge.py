"""Bridge between context addresses and plugin-declared audiences.

A context address whose modifier is not one of the built-in audiences
(``admins``, ``moderators``, ``role:{ROLE}``) is looked up here: the
context's enabled feature list names candidate plugins, and the first plugin
pattern whose suffix equals the modifier answers the question.

Plugins only expose a per-user predicate. Enumerating an audience for
delivery therefore runs the predicate over every approved member of the
context, bounded by a semaphore. A bulk resolver contract for plugins would
replace that fallback.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Literal

from kemotown.core.errors import AddressingError
from kemotown.core.settings import settings
from kemotown.repositories.context_repo import ContextRepository
from kemotown.repositories.membership_repo import MembershipRepository

from .registry import PluginRegistry
from .types import AddressPatternResolver, pattern_suffix

logger = logging.getLogger(__name__)

FailurePolicy = Literal["raise", "skip"]


class PluginResolverError(AddressingError):
    """Raised when a plugin address resolver fails under the ``raise`` policy."""

    def __init__(self, plugin_id: str, pattern: str, context_id: str, user_id: str) -> None:
        super().__init__(
            f"Resolver for {pattern!r} in plugin {plugin_id!r} failed "
            f"(context={context_id}, user={user_id})"
        )
        self.plugin_id = plugin_id
        self.pattern = pattern
        self.context_id = context_id
        self.user_id = user_id


@dataclass(frozen=True, slots=True)
class PatternMatch:
    """A plugin pattern selected for a context modifier."""

    plugin_id: str
    pattern: AddressPatternResolver


class PluginResolverBridge:
    """Resolve plugin-defined context modifiers for one viewer or all members."""

    def __init__(
        self,
        registry: PluginRegistry,
        contexts: ContextRepository,
        memberships: MembershipRepository,
        *,
        concurrency: int | None = None,
        failure_policy: FailurePolicy | None = None,
    ) -> None:
        self.registry = registry
        self.contexts = contexts
        self.memberships = memberships
        self.concurrency = max(1, concurrency or settings.plugin_resolver_concurrency)
        self.failure_policy: FailurePolicy = (
            failure_policy or settings.plugin_resolver_failure_policy
        )

    def find_pattern(self, context_id: str, modifier: str) -> PatternMatch | None:
        """Return the first enabled plugin pattern declaring ``modifier``."""
        features = self.contexts.get_features(context_id)
        if not features:
            return None

        for plugin_id in features:
            plugin = self.registry.get(plugin_id)
            if plugin is None:
                continue
            for pattern in plugin.address_patterns:
                if pattern_suffix(pattern.pattern) == modifier:
                    return PatternMatch(plugin_id=plugin_id, pattern=pattern)
        return None

    async def _call(self, match: PatternMatch, context_id: str, user_id: str) -> bool:
        try:
            return bool(await match.pattern.resolve(context_id, user_id))
        except Exception as exc:
            if self.failure_policy == "skip":
                logger.warning(
                    "Skipping user %s: resolver %s of plugin %s failed: %s",
                    user_id,
                    match.pattern.pattern,
                    match.plugin_id,
                    exc,
                )
                return False
            raise PluginResolverError(
                match.plugin_id, match.pattern.pattern, context_id, user_id
            ) from exc

    async def resolve(self, context_id: str, user_id: str, modifier: str) -> bool:
        """Return whether ``user_id`` is in the plugin audience ``modifier``.

        Unknown modifiers and missing contexts are a non-match.
        """
        match = self.find_pattern(context_id, modifier)
        if match is None:
            return False
        return await self._call(match, context_id, user_id)

    async def resolve_all(self, context_id: str, modifier: str) -> set[str]:
        """Return every approved member of the context in the audience ``modifier``."""
        match = self.find_pattern(context_id, modifier)
        if match is None:
            return set()

        candidates = self.memberships.list_approved_user_ids(context_id)
        if not candidates:
            return set()

        semaphore = asyncio.Semaphore(self.concurrency)

        async def check(user_id: str) -> tuple[str, bool]:
            async with semaphore:
                return user_id, await self._call(match, context_id, user_id)

        results = await asyncio.gather(*(check(user_id) for user_id in candidates))
        matched = {user_id for user_id, ok in results if ok}
        logger.debug(
            "Plugin pattern %s matched %d of %d members in context %s",
            match.pattern.pattern,
            len(matched),
            len(candidates),
            context_id,
        )
        return matched
