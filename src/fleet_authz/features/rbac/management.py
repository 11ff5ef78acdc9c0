"""User-management rules derived purely from the role hierarchy.

Overrides never feed into these answers: who may administer whom depends only
on hierarchy position.
"""

from __future__ import annotations

from fleet_authz.core.rbac.registry import ROLE_HIERARCHY, coerce_role, is_role_higher
from fleet_authz.core.rbac.types import Role


def can_manage_user(manager_role: Role | str, target_role: Role | str) -> bool:
    """Return whether a principal with ``manager_role`` may administer ``target_role``."""

    manager = coerce_role(manager_role)
    target = coerce_role(target_role)
    if manager is Role.SUPER_ADMIN:
        return True
    # Only a SUPER_ADMIN may manage another SUPER_ADMIN.
    if target is Role.SUPER_ADMIN:
        return False
    return is_role_higher(manager, target)


def can_assign_role(assigner_role: Role | str, role_to_assign: Role | str) -> bool:
    """Return whether ``assigner_role`` may hand out ``role_to_assign``.

    Only roles strictly below the assigner's own level can be granted, which
    rules out self- and peer-escalation.
    """

    assigner = coerce_role(assigner_role)
    if assigner is Role.SUPER_ADMIN:
        return True
    return is_role_higher(assigner, role_to_assign)


def assignable_roles(assigner_role: Role | str) -> list[Role]:
    assigner = coerce_role(assigner_role)
    if assigner is Role.SUPER_ADMIN:
        return list(ROLE_HIERARCHY)
    return [role for role in ROLE_HIERARCHY if is_role_higher(assigner, role)]


__all__ = ["assignable_roles", "can_assign_role", "can_manage_user"]
