"""Permission resolution, override management and user-management rules."""

from .management import assignable_roles, can_assign_role, can_manage_user
from .schemas import CheckOptions, Decision, PermissionOverrideRecord
from .service import (
    HIERARCHY_DENIAL_REASON,
    STORE_UNAVAILABLE_REASON,
    PermissionService,
    check_static,
    permissions_for_role,
    role_has_permission,
)
from .store import OverrideStore, SqlOverrideStore

__all__ = [
    "CheckOptions",
    "Decision",
    "HIERARCHY_DENIAL_REASON",
    "OverrideStore",
    "PermissionOverrideRecord",
    "PermissionService",
    "STORE_UNAVAILABLE_REASON",
    "SqlOverrideStore",
    "assignable_roles",
    "can_assign_role",
    "can_manage_user",
    "check_static",
    "permissions_for_role",
    "role_has_permission",
]
