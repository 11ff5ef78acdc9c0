"""FastAPI integration for the authorization engine."""

from .dependencies import (
    AuditLoggerDep,
    AuditRequestContext,
    AuditRequestContextDep,
    PermissionServiceDep,
    Principal,
    PrincipalDep,
    audit_request_context,
    get_audit_logger,
    get_current_principal,
    get_permission_service,
    require_permission,
)
from .errors import register_authz_exception_handlers
from .lifecycle import init_authz, shutdown_authz

__all__ = [
    "AuditLoggerDep",
    "AuditRequestContext",
    "AuditRequestContextDep",
    "PermissionServiceDep",
    "Principal",
    "PrincipalDep",
    "audit_request_context",
    "get_audit_logger",
    "get_current_principal",
    "get_permission_service",
    "init_authz",
    "register_authz_exception_handlers",
    "require_permission",
    "shutdown_authz",
]
