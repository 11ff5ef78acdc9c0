"""Static RBAC policy: role defaults, manage implications and self-access rules."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from .registry import ALL_PERMISSIONS, PERMISSIONS, resource_permissions
from .types import Action, Resource, Role

# Default permissions held by each role. SUPER_ADMIN is listed with the full
# catalog for display; checks short-circuit it before reading this map.
ROLE_PERMISSIONS: Mapping[Role, frozenset[str]] = MappingProxyType(
    {
        Role.USER: frozenset(
            {
                "vehicles:read",
                "bookings:create",
                "bookings:read",
                "reviews:create",
                "reviews:read",
                "reviews:update",
            }
        ),
        Role.MANAGER: frozenset(
            {
                "vehicles:read",
                "vehicles:update",
                "bookings:create",
                "bookings:read",
                "bookings:update",
                "reviews:create",
                "reviews:read",
                "reviews:update",
                "reviews:delete",
                "users:read",
                "payments:read",
            }
        ),
        Role.ADMIN: frozenset(
            {
                "users:read",
                "users:update",
                "users:create",
                "vehicles:create",
                "vehicles:read",
                "vehicles:update",
                "vehicles:delete",
                "vehicles:manage",
                "bookings:create",
                "bookings:read",
                "bookings:update",
                "bookings:delete",
                "bookings:manage",
                "reviews:create",
                "reviews:read",
                "reviews:update",
                "reviews:delete",
                "reviews:manage",
                "payments:read",
                "payments:update",
                "payments:manage",
                "audit_logs:read",
            }
        ),
        Role.SUPER_ADMIN: ALL_PERMISSIONS,
    }
)

# ``<resource>:manage`` implies every other catalog action on that resource.
MANAGE_IMPLICATIONS: Mapping[str, frozenset[str]] = MappingProxyType(
    {
        definition.key: resource_permissions(definition.resource) - {definition.key}
        for definition in PERMISSIONS
        if definition.action is Action.MANAGE
    }
)

# Self-access relaxation: a principal may always perform these on records
# they own, independent of role.
# TODO: move into the permission catalog once product settles which
# self-service actions are guaranteed.
OWN_RESOURCE_PERMISSIONS: frozenset[tuple[Resource, Action]] = frozenset(
    {
        (Resource.USERS, Action.READ),
        (Resource.USERS, Action.UPDATE),
        (Resource.BOOKINGS, Action.READ),
        (Resource.REVIEWS, Action.READ),
        (Resource.REVIEWS, Action.UPDATE),
        (Resource.REVIEWS, Action.DELETE),
    }
)


def expand_implications(keys: frozenset[str] | set[str]) -> frozenset[str]:
    """Return ``keys`` plus every action implied by a ``manage`` key among them."""

    expanded = set(keys)
    for key in keys:
        expanded.update(MANAGE_IMPLICATIONS.get(key, ()))
    return frozenset(expanded)


__all__ = [
    "MANAGE_IMPLICATIONS",
    "OWN_RESOURCE_PERMISSIONS",
    "ROLE_PERMISSIONS",
    "expand_implications",
]
