"""Canonical permission catalog and role hierarchy.

Both are immutable module constants built once at import. Adding a permission
or a role means editing this module; nothing else in the engine validates
against an external source.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from .errors import InvalidPermissionError
from .types import Action, PermissionDef, Resource, Role, RoleDef

PERMISSION_SEPARATOR = ":"


def _permission(resource: Resource, action: Action) -> PermissionDef:
    noun = resource.value.replace("_", " ")
    return PermissionDef(
        key=f"{resource.value}{PERMISSION_SEPARATOR}{action.value}",
        resource=resource,
        action=action,
        label=f"{action.value.capitalize()} {noun}",
    )


_CRUD_AND_MANAGE = (Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE, Action.MANAGE)

PERMISSIONS: tuple[PermissionDef, ...] = (
    *(_permission(Resource.USERS, action) for action in _CRUD_AND_MANAGE),
    *(_permission(Resource.VEHICLES, action) for action in _CRUD_AND_MANAGE),
    *(_permission(Resource.BOOKINGS, action) for action in _CRUD_AND_MANAGE),
    *(_permission(Resource.REVIEWS, action) for action in _CRUD_AND_MANAGE),
    _permission(Resource.PAYMENTS, Action.READ),
    _permission(Resource.PAYMENTS, Action.UPDATE),
    _permission(Resource.PAYMENTS, Action.MANAGE),
    _permission(Resource.PERMISSIONS, Action.READ),
    _permission(Resource.PERMISSIONS, Action.MANAGE),
    _permission(Resource.AUDIT_LOGS, Action.READ),
)

PERMISSION_REGISTRY: Mapping[str, PermissionDef] = MappingProxyType(
    {definition.key: definition for definition in PERMISSIONS}
)

ALL_PERMISSIONS: frozenset[str] = frozenset(PERMISSION_REGISTRY)

ROLE_HIERARCHY: tuple[Role, ...] = (
    Role.USER,
    Role.MANAGER,
    Role.ADMIN,
    Role.SUPER_ADMIN,
)

_ROLE_LEVELS: Mapping[Role, int] = MappingProxyType(
    {role: index for index, role in enumerate(ROLE_HIERARCHY)}
)

ROLE_DEFINITIONS: tuple[RoleDef, ...] = (
    RoleDef(
        role=Role.USER,
        level=_ROLE_LEVELS[Role.USER],
        name="User",
        description="Regular user with booking and review capabilities",
    ),
    RoleDef(
        role=Role.MANAGER,
        level=_ROLE_LEVELS[Role.MANAGER],
        name="Manager",
        description="Can manage bookings and reviews, view reports",
    ),
    RoleDef(
        role=Role.ADMIN,
        level=_ROLE_LEVELS[Role.ADMIN],
        name="Administrator",
        description="Full management access except user deletion and permissions",
    ),
    RoleDef(
        role=Role.SUPER_ADMIN,
        level=_ROLE_LEVELS[Role.SUPER_ADMIN],
        name="Super Administrator",
        description="Complete system access including user management and permissions",
    ),
)

ROLE_DEFINITION_BY_ROLE: Mapping[Role, RoleDef] = MappingProxyType(
    {definition.role: definition for definition in ROLE_DEFINITIONS}
)


def coerce_role(value: Role | str) -> Role:
    """Return ``value`` as a :class:`Role`, accepting case-insensitive names."""

    if isinstance(value, Role):
        return value
    candidate = str(value).strip().upper()
    try:
        return Role(candidate)
    except ValueError:
        raise ValueError(f"Unknown role '{value}'") from None


def normalize_permission(value: str | PermissionDef) -> str:
    """Return the catalog key for ``value`` or raise :class:`InvalidPermissionError`."""

    if isinstance(value, PermissionDef):
        key = value.key
    else:
        key = str(value).strip()
    if key not in PERMISSION_REGISTRY:
        raise InvalidPermissionError(value)
    return key


def parse_permission(value: str | PermissionDef) -> tuple[Resource, Action]:
    definition = PERMISSION_REGISTRY[normalize_permission(value)]
    return definition.resource, definition.action


def manage_permission_for(resource: Resource) -> str:
    """Return the ``<resource>:manage`` key; every resource in the catalog has one."""

    return f"{resource.value}{PERMISSION_SEPARATOR}{Action.MANAGE.value}"


def resource_permissions(resource: Resource) -> frozenset[str]:
    return frozenset(
        definition.key for definition in PERMISSIONS if definition.resource is resource
    )


def role_level(role: Role | str) -> int:
    """Return the hierarchy position of ``role`` (0 for ``USER``)."""

    return _ROLE_LEVELS[coerce_role(role)]


def is_role_higher_or_equal(role_a: Role | str, role_b: Role | str) -> bool:
    return role_level(role_a) >= role_level(role_b)


def is_role_higher(role_a: Role | str, role_b: Role | str) -> bool:
    """Return ``True`` when ``role_a`` sits strictly above ``role_b``."""

    return role_level(role_a) > role_level(role_b)


__all__ = [
    "ALL_PERMISSIONS",
    "PERMISSIONS",
    "PERMISSION_REGISTRY",
    "PERMISSION_SEPARATOR",
    "ROLE_DEFINITIONS",
    "ROLE_DEFINITION_BY_ROLE",
    "ROLE_HIERARCHY",
    "coerce_role",
    "is_role_higher",
    "is_role_higher_or_equal",
    "manage_permission_for",
    "normalize_permission",
    "parse_permission",
    "resource_permissions",
    "role_level",
]
