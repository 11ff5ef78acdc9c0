"""Static and dynamic permission resolution plus override management."""

from __future__ import annotations

import logging

from fleet_authz.common.logging import log_context
from fleet_authz.core.rbac.errors import StoreError
from fleet_authz.core.rbac.policy import (
    OWN_RESOURCE_PERMISSIONS,
    ROLE_PERMISSIONS,
    expand_implications,
)
from fleet_authz.core.rbac.registry import (
    ALL_PERMISSIONS,
    PERMISSION_REGISTRY,
    coerce_role,
    manage_permission_for,
    normalize_permission,
    parse_permission,
)
from fleet_authz.core.rbac.types import Resource, Role

from .management import can_manage_user
from .schemas import CheckOptions, Decision, PermissionOverrideRecord
from .store import OverrideStore

logger = logging.getLogger(__name__)

STORE_UNAVAILABLE_REASON = "Permission store unavailable"
HIERARCHY_DENIAL_REASON = "Cannot manage users with equal or higher role"

_DEFAULT_OPTIONS = CheckOptions()


# ---------------------------------------------------------------------------
# Static resolution (no I/O)
# ---------------------------------------------------------------------------


def role_has_permission(role: Role | str, permission: str) -> bool:
    """Return whether ``role`` holds ``permission`` by default.

    ``<resource>:manage`` in the role's map grants every action on that
    resource. SUPER_ADMIN holds everything.
    """
    resolved = coerce_role(role)
    key = normalize_permission(permission)
    if resolved is Role.SUPER_ADMIN:
        return True

    granted = ROLE_PERMISSIONS.get(resolved, frozenset())
    if key in granted:
        return True

    resource, _ = parse_permission(key)
    return manage_permission_for(resource) in granted


def permissions_for_role(role: Role | str) -> frozenset[str]:
    """Return the role's default permissions with ``manage`` implications expanded."""

    resolved = coerce_role(role)
    if resolved is Role.SUPER_ADMIN:
        return ALL_PERMISSIONS
    return expand_implications(ROLE_PERMISSIONS.get(resolved, frozenset()))


def _lacks_permission(role: Role, permission: str) -> Decision:
    return Decision.deny(f"Role {role.value} lacks permission {permission}")


def _hierarchy_denial(role: Role, resource: Resource, options: CheckOptions) -> Decision | None:
    if options.target_role is None or resource is not Resource.USERS:
        return None
    if can_manage_user(role, options.target_role):
        return None
    return Decision.deny(HIERARCHY_DENIAL_REASON)


def check_static(
    role: Role | str,
    permission: str,
    options: CheckOptions | None = None,
) -> Decision:
    """Decide ``permission`` for ``role`` without touching any store."""

    key = normalize_permission(permission)
    resolved = coerce_role(role)
    opts = options or _DEFAULT_OPTIONS

    if resolved is Role.SUPER_ADMIN:
        return Decision.allow()

    resource, action = parse_permission(key)
    denial = _hierarchy_denial(resolved, resource, opts)
    if denial is not None:
        return denial

    if opts.own_resource and (resource, action) in OWN_RESOURCE_PERMISSIONS:
        return Decision.allow()

    if role_has_permission(resolved, key):
        return Decision.allow()

    return _lacks_permission(resolved, key)


# ---------------------------------------------------------------------------
# Dynamic resolution
# ---------------------------------------------------------------------------


class PermissionService:
    """Combine role defaults with per-principal overrides.

    Grant, deny and revoke are not self-protecting: the caller must already
    hold ``permissions:manage`` and pass ``can_manage_user`` for the target
    principal before calling them.
    """

    def __init__(self, store: OverrideStore, *, allow_degraded: bool = False) -> None:
        self._store = store
        self._allow_degraded = allow_degraded

    @property
    def store(self) -> OverrideStore:
        return self._store

    def check_static(
        self,
        role: Role | str,
        permission: str,
        options: CheckOptions | None = None,
    ) -> Decision:
        return check_static(role, permission, options)

    def check_dynamic(
        self,
        principal_id: str,
        role: Role | str,
        permission: str,
        options: CheckOptions | None = None,
    ) -> Decision:
        """Decide ``permission`` for a principal, consulting overrides.

        Raises :class:`StoreError` when the override store fails; a store
        failure never produces an allow.
        """
        key = normalize_permission(permission)
        resolved = coerce_role(role)
        if resolved is Role.SUPER_ADMIN:
            return Decision.allow()

        # Overrides never widen user-management authority.
        resource, _ = parse_permission(key)
        denial = _hierarchy_denial(resolved, resource, options or _DEFAULT_OPTIONS)
        if denial is not None:
            return denial

        static = check_static(resolved, key, options)
        if static.allowed:
            return static

        try:
            override = self._store.find_override(principal_id, key)
            if override is not None:
                if override.granted:
                    return Decision.allow()
                return self._denied(
                    principal_id,
                    resolved,
                    key,
                    f"Permission {key} explicitly denied for this user",
                )

            manage_key = manage_permission_for(resource)
            if manage_key != key:
                manage_override = self._store.find_override(principal_id, manage_key)
                if manage_override is not None and manage_override.granted:
                    return Decision.allow()
        except StoreError:
            logger.warning(
                "rbac.check.store_error",
                extra=log_context(principal_id=principal_id, role=resolved, permission=key),
                exc_info=True,
            )
            raise

        return self._denied(
            principal_id, resolved, key, f"Role {resolved.value} lacks permission {key}"
        )

    def authorize(
        self,
        principal_id: str,
        role: Role | str,
        permission: str,
        options: CheckOptions | None = None,
        *,
        allow_degraded: bool | None = None,
    ) -> Decision:
        """Fail-closed variant of :meth:`check_dynamic` that never raises ``StoreError``.

        With degraded mode enabled a store failure falls back to the static
        decision; otherwise it is a denial.
        """
        try:
            return self.check_dynamic(principal_id, role, permission, options)
        except StoreError:
            degraded = self._allow_degraded if allow_degraded is None else allow_degraded
            if degraded:
                return check_static(role, permission, options)
            return Decision.deny(STORE_UNAVAILABLE_REASON)

    def get_effective_permissions(self, principal_id: str, role: Role | str) -> frozenset[str]:
        """Return role defaults plus granted overrides minus denied overrides."""

        resolved = coerce_role(role)
        if resolved is Role.SUPER_ADMIN:
            return ALL_PERMISSIONS

        effective = set(permissions_for_role(resolved))
        denied: set[str] = set()
        for override in self._store.list_overrides(principal_id):
            if override.permission not in PERMISSION_REGISTRY:
                logger.warning(
                    "rbac.override.unknown_permission",
                    extra=log_context(principal_id=principal_id, permission=override.permission),
                )
                continue
            if override.granted:
                effective.update(expand_implications({override.permission}))
            else:
                denied.add(override.permission)
        return frozenset(effective - denied)

    def list_overrides(self, principal_id: str) -> list[PermissionOverrideRecord]:
        return self._store.list_overrides(principal_id)

    def grant_permission(self, principal_id: str, permission: str) -> PermissionOverrideRecord:
        return self._set_override(principal_id, permission, granted=True)

    def deny_permission(self, principal_id: str, permission: str) -> PermissionOverrideRecord:
        return self._set_override(principal_id, permission, granted=False)

    def revoke_permission(self, principal_id: str, permission: str) -> bool:
        """Delete any override for the pair; returns whether one existed."""

        key = normalize_permission(permission)
        removed = self._store.delete_override(principal_id, key)
        logger.info(
            "rbac.override.revoke",
            extra=log_context(principal_id=principal_id, permission=key, removed=removed),
        )
        return removed

    def _set_override(
        self, principal_id: str, permission: str, *, granted: bool
    ) -> PermissionOverrideRecord:
        key = normalize_permission(permission)
        record = self._store.upsert_override(principal_id, key, granted)
        logger.info(
            "rbac.override.grant" if granted else "rbac.override.deny",
            extra=log_context(principal_id=principal_id, permission=key),
        )
        return record

    @staticmethod
    def _denied(principal_id: str, role: Role, permission: str, reason: str) -> Decision:
        logger.debug(
            "rbac.check.denied",
            extra=log_context(
                principal_id=principal_id, role=role, permission=permission, reason=reason
            ),
        )
        return Decision.deny(reason)


__all__ = [
    "HIERARCHY_DENIAL_REASON",
    "PermissionService",
    "STORE_UNAVAILABLE_REASON",
    "check_static",
    "permissions_for_role",
    "role_has_permission",
]
