from __future__ import annotations

import logging

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from fleet_authz.core.rbac import ALL_PERMISSIONS, InvalidPermissionError, Role, StoreError
from fleet_authz.db.models import PermissionOverride
from fleet_authz.features.rbac import (
    HIERARCHY_DENIAL_REASON,
    STORE_UNAVAILABLE_REASON,
    CheckOptions,
    PermissionOverrideRecord,
    PermissionService,
    check_static,
)


class _UntouchableStore:
    """Fails the test if the resolver reaches the store."""

    def _fail(self, *args: object) -> None:
        raise AssertionError(f"store accessed with {args!r}")

    find_override = upsert_override = delete_override = list_overrides = _fail


class _UnavailableStore:
    def __init__(self) -> None:
        self.calls = 0

    def _raise(self, *args: object) -> None:
        self.calls += 1
        raise StoreError("override store find failed", operation="find")

    find_override = upsert_override = delete_override = list_overrides = _raise


class _StaticStore:
    def __init__(self, *records: PermissionOverrideRecord) -> None:
        self._records = list(records)

    def find_override(self, principal_id: str, permission: str) -> PermissionOverrideRecord | None:
        for record in self._records:
            if record.principal_id == principal_id and record.permission == permission:
                return record
        return None

    def list_overrides(self, principal_id: str) -> list[PermissionOverrideRecord]:
        return [record for record in self._records if record.principal_id == principal_id]


def test_super_admin_never_consults_the_store() -> None:
    service = PermissionService(_UntouchableStore())

    for permission in ALL_PERMISSIONS:
        assert service.check_dynamic("root", Role.SUPER_ADMIN, permission).allowed

    assert service.get_effective_permissions("root", Role.SUPER_ADMIN) == ALL_PERMISSIONS


def test_static_allow_returns_before_reading_overrides() -> None:
    service = PermissionService(_UntouchableStore())

    assert service.check_dynamic("usr_1", Role.USER, "bookings:create").allowed


def test_invalid_permission_raises_before_store_access() -> None:
    service = PermissionService(_UntouchableStore())

    with pytest.raises(InvalidPermissionError):
        service.check_dynamic("usr_1", Role.USER, "bookings:archive")
    with pytest.raises(InvalidPermissionError):
        service.grant_permission("usr_1", "bookings:archive")


def test_grant_then_deny_keeps_a_single_row(
    permission_service: PermissionService,
    session_factory: sessionmaker[Session],
) -> None:
    granted = permission_service.grant_permission("usr_1", "bookings:delete")
    assert granted.granted is True
    assert permission_service.check_dynamic("usr_1", Role.USER, "bookings:delete").allowed

    denied = permission_service.deny_permission("usr_1", "bookings:delete")
    assert denied.granted is False
    assert denied.id == granted.id

    decision = permission_service.check_dynamic("usr_1", Role.USER, "bookings:delete")
    assert not decision.allowed
    assert decision.reason == "Permission bookings:delete explicitly denied for this user"

    with session_factory() as session:
        count = session.scalar(
            select(func.count())
            .select_from(PermissionOverride)
            .where(PermissionOverride.principal_id == "usr_1")
        )
    assert count == 1


def test_revoke_restores_the_static_result(permission_service: PermissionService) -> None:
    permission_service.grant_permission("usr_1", "vehicles:update")
    assert permission_service.check_dynamic("usr_1", Role.USER, "vehicles:update").allowed

    assert permission_service.revoke_permission("usr_1", "vehicles:update") is True
    assert permission_service.revoke_permission("usr_1", "vehicles:update") is False

    dynamic = permission_service.check_dynamic("usr_1", Role.USER, "vehicles:update")
    assert dynamic == check_static(Role.USER, "vehicles:update")


def test_granted_manage_override_covers_other_actions(
    permission_service: PermissionService,
) -> None:
    permission_service.grant_permission("usr_1", "vehicles:manage")

    assert permission_service.check_dynamic("usr_1", Role.USER, "vehicles:delete").allowed
    effective = permission_service.get_effective_permissions("usr_1", Role.USER)
    assert {"vehicles:create", "vehicles:update", "vehicles:delete"} <= effective


def test_overrides_are_scoped_to_the_principal(permission_service: PermissionService) -> None:
    permission_service.grant_permission("usr_1", "payments:read")

    assert permission_service.check_dynamic("usr_1", Role.USER, "payments:read").allowed
    assert not permission_service.check_dynamic("usr_2", Role.USER, "payments:read").allowed


def test_manager_user_deletion_scenario(permission_service: PermissionService) -> None:
    decision = permission_service.check_dynamic("mgr_1", Role.MANAGER, "users:delete")
    assert decision.reason == "Role MANAGER lacks permission users:delete"

    permission_service.grant_permission("mgr_1", "users:delete")

    assert permission_service.check_dynamic("mgr_1", Role.MANAGER, "users:delete").allowed
    assert permission_service.check_dynamic(
        "mgr_1", Role.MANAGER, "users:delete", CheckOptions(target_role=Role.USER)
    ).allowed

    blocked = permission_service.check_dynamic(
        "mgr_1", Role.MANAGER, "users:delete", CheckOptions(target_role=Role.ADMIN)
    )
    assert not blocked.allowed
    assert blocked.reason == HIERARCHY_DENIAL_REASON


def test_own_review_scenario(permission_service: PermissionService) -> None:
    own = CheckOptions(own_resource=True)

    assert permission_service.check_dynamic("usr_1", Role.USER, "reviews:delete", own).allowed
    assert not permission_service.check_dynamic("usr_1", Role.USER, "reviews:delete").allowed


def test_effective_permissions_apply_grants_and_denials(
    permission_service: PermissionService,
) -> None:
    permission_service.grant_permission("usr_1", "payments:read")
    permission_service.deny_permission("usr_1", "reviews:update")

    effective = permission_service.get_effective_permissions("usr_1", Role.USER)

    assert "payments:read" in effective
    assert "reviews:update" not in effective
    assert "bookings:create" in effective


def test_effective_permissions_skip_unknown_stored_keys(
    caplog: pytest.LogCaptureFixture,
) -> None:
    service = PermissionService(
        _StaticStore(
            PermissionOverrideRecord(
                principal_id="usr_1", permission="legacy:thing", granted=True
            ),
            PermissionOverrideRecord(
                principal_id="usr_1", permission="payments:read", granted=True
            ),
        )
    )

    with caplog.at_level(logging.WARNING):
        effective = service.get_effective_permissions("usr_1", Role.USER)

    assert "payments:read" in effective
    assert "legacy:thing" not in effective
    assert any(record.message == "rbac.override.unknown_permission" for record in caplog.records)


def test_list_overrides_is_sorted_by_permission(permission_service: PermissionService) -> None:
    permission_service.grant_permission("usr_1", "vehicles:update")
    permission_service.deny_permission("usr_1", "bookings:read")

    records = permission_service.list_overrides("usr_1")

    assert [(record.permission, record.granted) for record in records] == [
        ("bookings:read", False),
        ("vehicles:update", True),
    ]


def test_check_dynamic_propagates_store_errors() -> None:
    service = PermissionService(_UnavailableStore())

    with pytest.raises(StoreError):
        service.check_dynamic("usr_1", Role.USER, "payments:read")


def test_authorize_fails_closed_on_store_error() -> None:
    service = PermissionService(_UnavailableStore())

    decision = service.authorize("usr_1", Role.ADMIN, "users:delete")

    assert not decision.allowed
    assert decision.reason == STORE_UNAVAILABLE_REASON


def test_authorize_can_degrade_to_static_result() -> None:
    store = _UnavailableStore()
    service = PermissionService(store, allow_degraded=True)

    decision = service.authorize("usr_1", Role.MANAGER, "users:delete")

    assert store.calls == 1
    assert decision == check_static(Role.MANAGER, "users:delete")
    assert decision.reason == "Role MANAGER lacks permission users:delete"

    own = CheckOptions(own_resource=True)
    assert service.authorize("usr_1", Role.USER, "reviews:delete", own).allowed
    assert store.calls == 1


def test_authorize_per_call_degraded_flag() -> None:
    store = _UnavailableStore()
    service = PermissionService(store)

    decision = service.authorize("usr_1", Role.USER, "payments:read", allow_degraded=True)

    assert decision.reason == "Role USER lacks permission payments:read"
    assert store.calls == 1
