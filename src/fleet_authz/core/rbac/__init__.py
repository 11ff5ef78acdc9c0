"""RBAC contracts and registries shared across features."""

from .errors import InvalidPermissionError, StoreError
from .policy import (
    MANAGE_IMPLICATIONS,
    OWN_RESOURCE_PERMISSIONS,
    ROLE_PERMISSIONS,
    expand_implications,
)
from .registry import (
    ALL_PERMISSIONS,
    PERMISSION_REGISTRY,
    PERMISSIONS,
    ROLE_DEFINITION_BY_ROLE,
    ROLE_DEFINITIONS,
    ROLE_HIERARCHY,
    coerce_role,
    is_role_higher,
    is_role_higher_or_equal,
    manage_permission_for,
    normalize_permission,
    parse_permission,
    role_level,
)
from .types import Action, PermissionDef, Resource, Role, RoleDef

__all__ = [
    "ALL_PERMISSIONS",
    "Action",
    "InvalidPermissionError",
    "MANAGE_IMPLICATIONS",
    "OWN_RESOURCE_PERMISSIONS",
    "PERMISSIONS",
    "PERMISSION_REGISTRY",
    "PermissionDef",
    "ROLE_DEFINITIONS",
    "ROLE_DEFINITION_BY_ROLE",
    "ROLE_HIERARCHY",
    "ROLE_PERMISSIONS",
    "Resource",
    "Role",
    "RoleDef",
    "StoreError",
    "coerce_role",
    "expand_implications",
    "is_role_higher",
    "is_role_higher_or_equal",
    "manage_permission_for",
    "normalize_permission",
    "parse_permission",
    "role_level",
]
