from __future__ import annotations

import pytest

from fleet_authz.core.rbac import (
    ALL_PERMISSIONS,
    MANAGE_IMPLICATIONS,
    PERMISSION_REGISTRY,
    ROLE_DEFINITION_BY_ROLE,
    ROLE_HIERARCHY,
    Action,
    InvalidPermissionError,
    PermissionDef,
    Resource,
    Role,
    coerce_role,
    expand_implications,
    is_role_higher,
    is_role_higher_or_equal,
    manage_permission_for,
    normalize_permission,
    parse_permission,
    role_level,
)


def test_catalog_matches_closed_set() -> None:
    actions = ("create", "read", "update", "delete", "manage")
    expected = {
        f"{resource}:{action}"
        for resource in ("users", "vehicles", "bookings", "reviews")
        for action in actions
    }
    expected |= {
        "payments:read",
        "payments:update",
        "payments:manage",
        "permissions:read",
        "permissions:manage",
        "audit_logs:read",
    }

    assert ALL_PERMISSIONS == expected
    assert set(PERMISSION_REGISTRY) == expected


def test_permission_labels_are_human_readable() -> None:
    assert PERMISSION_REGISTRY["audit_logs:read"].label == "Read audit logs"
    assert PERMISSION_REGISTRY["bookings:manage"].label == "Manage bookings"


def test_role_hierarchy_is_a_strict_total_order() -> None:
    assert ROLE_HIERARCHY == (Role.USER, Role.MANAGER, Role.ADMIN, Role.SUPER_ADMIN)
    levels = [role_level(role) for role in ROLE_HIERARCHY]
    assert levels == sorted(set(levels))

    for a in ROLE_HIERARCHY:
        for b in ROLE_HIERARCHY:
            assert is_role_higher_or_equal(a, b) == (role_level(a) >= role_level(b))
            if a != b:
                assert is_role_higher(a, b) != is_role_higher(b, a)
        assert is_role_higher_or_equal(a, a)
        assert not is_role_higher(a, a)


def test_role_definitions_carry_display_metadata() -> None:
    definition = ROLE_DEFINITION_BY_ROLE[Role.SUPER_ADMIN]
    assert definition.name == "Super Administrator"
    assert definition.level == 3


def test_coerce_role_accepts_any_case() -> None:
    assert coerce_role("admin") is Role.ADMIN
    assert coerce_role(" Super_Admin ") is Role.SUPER_ADMIN
    assert coerce_role(Role.USER) is Role.USER


def test_coerce_role_rejects_unknown_names() -> None:
    with pytest.raises(ValueError, match="Unknown role 'owner'"):
        coerce_role("owner")


def test_normalize_permission_accepts_definitions() -> None:
    definition = PERMISSION_REGISTRY["reviews:delete"]
    assert isinstance(definition, PermissionDef)
    assert normalize_permission(definition) == "reviews:delete"
    assert normalize_permission(" reviews:delete ") == "reviews:delete"


@pytest.mark.parametrize(
    "value", ["payments:delete", "audit_logs:manage", "users", "", "USERS:READ"]
)
def test_unknown_permissions_are_rejected(value: str) -> None:
    with pytest.raises(InvalidPermissionError) as excinfo:
        normalize_permission(value)

    assert excinfo.value.permission == value
    assert isinstance(excinfo.value, ValueError)


def test_parse_permission_splits_resource_and_action() -> None:
    assert parse_permission("audit_logs:read") == (Resource.AUDIT_LOGS, Action.READ)


def test_manage_implications_cover_every_other_action() -> None:
    assert manage_permission_for(Resource.PAYMENTS) == "payments:manage"
    assert MANAGE_IMPLICATIONS["payments:manage"] == {"payments:read", "payments:update"}
    assert MANAGE_IMPLICATIONS["permissions:manage"] == {"permissions:read"}
    assert "audit_logs:manage" not in MANAGE_IMPLICATIONS


def test_expand_implications_keeps_unrelated_keys() -> None:
    expanded = expand_implications({"vehicles:manage", "bookings:read"})

    assert expanded == {
        "vehicles:manage",
        "vehicles:create",
        "vehicles:read",
        "vehicles:update",
        "vehicles:delete",
        "bookings:read",
    }
