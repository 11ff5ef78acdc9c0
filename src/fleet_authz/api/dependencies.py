"""FastAPI dependencies that bridge HTTP requests to the permission engine."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from fleet_authz.core.rbac.registry import normalize_permission
from fleet_authz.core.rbac.types import Role
from fleet_authz.features.audit import AuditLogger, client_address, request_info
from fleet_authz.features.rbac import CheckOptions, PermissionService

from .lifecycle import get_audit_logger_from_app, get_permission_service_from_app


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated actor as seen by the engine."""

    principal_id: str
    role: Role


@dataclass(frozen=True, slots=True)
class AuditRequestContext:
    ip_address: str | None
    user_agent: str | None


PermissionDependency = Callable[..., Principal]


def get_current_principal(request: Request) -> Principal:
    """Resolve the caller.

    Host applications replace this through ``app.dependency_overrides`` with
    their own authentication.
    """

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication required",
    )


def get_permission_service(request: Request) -> PermissionService:
    return get_permission_service_from_app(request)


def get_audit_logger(request: Request) -> AuditLogger:
    return get_audit_logger_from_app(request)


def audit_request_context(request: Request) -> AuditRequestContext:
    """Return the client address and user agent to attach to audit entries."""

    ip_address, user_agent = request_info(request.headers)
    if ip_address is None and request.client is not None:
        ip_address = client_address(request.client.host)
    return AuditRequestContext(ip_address=ip_address, user_agent=user_agent)


PrincipalDep = Annotated[Principal, Depends(get_current_principal)]
PermissionServiceDep = Annotated[PermissionService, Depends(get_permission_service)]
AuditLoggerDep = Annotated[AuditLogger, Depends(get_audit_logger)]
AuditRequestContextDep = Annotated[AuditRequestContext, Depends(audit_request_context)]


def require_permission(
    permission: str,
    *,
    own_resource: bool = False,
) -> PermissionDependency:
    """Return a dependency enforcing ``permission`` for the current principal.

    The permission is validated when the route is declared, so a typo fails
    at import time rather than on the first request.
    """
    key = normalize_permission(permission)
    options = CheckOptions(own_resource=own_resource)

    def dependency(principal: PrincipalDep, service: PermissionServiceDep) -> Principal:
        decision = service.authorize(principal.principal_id, principal.role, key, options)
        if not decision.allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=decision.reason)
        return principal

    return dependency


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
    "require_permission",
]
