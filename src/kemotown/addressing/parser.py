"""Address parsing, construction and inspection helpers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .types import (
    CONTEXT_PREFIX,
    FOLLOWERS,
    MODIFIER_ADMINS,
    MODIFIER_MODERATORS,
    MODIFIER_ROLE_PREFIX,
    PUBLIC,
    USER_PREFIX,
    AddressKind,
    ParsedAddress,
)


def parse_address(address: str) -> ParsedAddress:
    """Parse an address string into a :class:`ParsedAddress`.

    Never raises: anything outside the grammar, including the legacy
    ``event:{id}`` form, comes back as ``AddressKind.UNKNOWN`` and matches
    nobody downstream.
    """
    if not isinstance(address, str):
        return ParsedAddress(kind=AddressKind.UNKNOWN, raw=str(address))

    if address == PUBLIC:
        return ParsedAddress(kind=AddressKind.PUBLIC, raw=address)

    if address == FOLLOWERS:
        return ParsedAddress(kind=AddressKind.FOLLOWERS, raw=address)

    if address.startswith(USER_PREFIX):
        return ParsedAddress(kind=AddressKind.USER, raw=address, id=address[len(USER_PREFIX):])

    if address.startswith(CONTEXT_PREFIX):
        remainder = address[len(CONTEXT_PREFIX):]
        context_id, sep, modifier = remainder.partition(":")
        if not sep:
            return ParsedAddress(kind=AddressKind.CONTEXT, raw=address, id=remainder)
        return ParsedAddress(
            kind=AddressKind.CONTEXT,
            raw=address,
            id=context_id,
            modifier=modifier,
        )

    return ParsedAddress(kind=AddressKind.UNKNOWN, raw=address)


# Constructors


def public_address() -> str:
    return PUBLIC


def followers_address() -> str:
    return FOLLOWERS


def user_address(user_id: str) -> str:
    return f"{USER_PREFIX}{user_id}"


def context_address(context_id: str) -> str:
    """Address every approved member of a context."""
    return f"{CONTEXT_PREFIX}{context_id}"


def context_admins_address(context_id: str) -> str:
    """Address OWNER and ADMIN members."""
    return f"{CONTEXT_PREFIX}{context_id}:{MODIFIER_ADMINS}"


def context_moderators_address(context_id: str) -> str:
    """Address OWNER, ADMIN and MODERATOR members."""
    return f"{CONTEXT_PREFIX}{context_id}:{MODIFIER_MODERATORS}"


def context_role_address(context_id: str, role: str) -> str:
    """Address members holding exactly ``role``."""
    return f"{CONTEXT_PREFIX}{context_id}:{MODIFIER_ROLE_PREFIX}{role}"


# Inspection


def is_public_address(addresses: Sequence[str]) -> bool:
    return PUBLIC in addresses


def is_followers_address(addresses: Sequence[str]) -> bool:
    return FOLLOWERS in addresses


def _unique_ids(addresses: Iterable[str], kind: AddressKind) -> list[str]:
    ids: dict[str, None] = {}
    for address in addresses:
        parsed = parse_address(address)
        if parsed.kind is kind and parsed.id:
            ids.setdefault(parsed.id)
    return list(ids)


def extract_context_ids(addresses: Iterable[str]) -> list[str]:
    """Return the distinct context ids referenced, in first-seen order."""
    return _unique_ids(addresses, AddressKind.CONTEXT)


def extract_user_ids(addresses: Iterable[str]) -> list[str]:
    """Return the distinct user ids referenced, in first-seen order."""
    return _unique_ids(addresses, AddressKind.USER)


def address_targets_user(addresses: Sequence[str], user_id: str) -> bool:
    """Return True when ``user:{user_id}`` is among the addresses."""
    return user_address(user_id) in addresses


def address_targets_context(addresses: Iterable[str], context_id: str) -> bool:
    """Return True when any context address (with or without modifier) names ``context_id``."""
    return any(
        parsed.kind is AddressKind.CONTEXT and parsed.id == context_id
        for parsed in map(parse_address, addresses)
    )


def combine_addresses(*address_lists: Iterable[str]) -> list[str]:
    """Merge address lists, dropping duplicates and keeping first-seen order."""
    combined: dict[str, None] = {}
    for addresses in address_lists:
        for address in addresses:
            combined.setdefault(address)
    return list(combined)
