"""Fleet authz: role-based authorization with per-principal overrides and an audit trail."""

from fleet_authz.core.rbac import (
    ALL_PERMISSIONS,
    PERMISSION_REGISTRY,
    ROLE_HIERARCHY,
    Action,
    InvalidPermissionError,
    Resource,
    Role,
    StoreError,
    coerce_role,
    is_role_higher,
    is_role_higher_or_equal,
    normalize_permission,
    role_level,
)
from fleet_authz.features.audit import (
    AuditAction,
    AuditLogEntry,
    AuditLogFilters,
    AuditLogger,
    AuditLogPage,
    AuditResource,
    SqlAuditStore,
    describe_action,
    request_info,
)
from fleet_authz.features.rbac import (
    CheckOptions,
    Decision,
    PermissionService,
    SqlOverrideStore,
    assignable_roles,
    can_assign_role,
    can_manage_user,
    check_static,
    permissions_for_role,
    role_has_permission,
)
from fleet_authz.settings import Settings, get_settings, reload_settings

__version__ = "0.1.0"

__all__ = [
    "ALL_PERMISSIONS",
    "Action",
    "AuditAction",
    "AuditLogEntry",
    "AuditLogFilters",
    "AuditLogPage",
    "AuditLogger",
    "AuditResource",
    "CheckOptions",
    "Decision",
    "InvalidPermissionError",
    "PERMISSION_REGISTRY",
    "PermissionService",
    "ROLE_HIERARCHY",
    "Resource",
    "Role",
    "Settings",
    "SqlAuditStore",
    "SqlOverrideStore",
    "StoreError",
    "__version__",
    "assignable_roles",
    "can_assign_role",
    "can_manage_user",
    "check_static",
    "coerce_role",
    "describe_action",
    "get_settings",
    "is_role_higher",
    "is_role_higher_or_equal",
    "normalize_permission",
    "permissions_for_role",
    "reload_settings",
    "request_info",
    "role_has_permission",
    "role_level",
]
