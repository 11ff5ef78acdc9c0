from __future__ import annotations

import pytest

from fleet_authz.core.rbac import ROLE_HIERARCHY, Role
from fleet_authz.features.rbac import assignable_roles, can_assign_role, can_manage_user


@pytest.mark.parametrize(
    ("manager", "target", "expected"),
    [
        (Role.SUPER_ADMIN, Role.SUPER_ADMIN, True),
        (Role.SUPER_ADMIN, Role.USER, True),
        (Role.ADMIN, Role.SUPER_ADMIN, False),
        (Role.ADMIN, Role.ADMIN, False),
        (Role.ADMIN, Role.MANAGER, True),
        (Role.MANAGER, Role.USER, True),
        (Role.MANAGER, Role.MANAGER, False),
        (Role.USER, Role.USER, False),
    ],
)
def test_can_manage_user(manager: Role, target: Role, expected: bool) -> None:
    assert can_manage_user(manager, target) is expected


def test_can_manage_user_accepts_role_names() -> None:
    assert can_manage_user("admin", "user")


def test_role_assignment_ceiling() -> None:
    assert assignable_roles(Role.MANAGER) == [Role.USER]
    assert assignable_roles(Role.ADMIN) == [Role.USER, Role.MANAGER]
    assert assignable_roles(Role.USER) == []
    assert assignable_roles(Role.SUPER_ADMIN) == list(ROLE_HIERARCHY)


def test_can_assign_role_blocks_peer_escalation() -> None:
    assert not can_assign_role(Role.ADMIN, Role.ADMIN)
    assert not can_assign_role(Role.MANAGER, Role.SUPER_ADMIN)
    assert can_assign_role(Role.ADMIN, Role.MANAGER)
    assert can_assign_role(Role.SUPER_ADMIN, Role.SUPER_ADMIN)
