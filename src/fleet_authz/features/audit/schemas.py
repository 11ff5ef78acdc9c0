"""Audit taxonomy and the records exchanged with the audit store."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from fleet_authz.settings import DEFAULT_AUDIT_PAGE_SIZE

MAX_IP_ADDRESS_LENGTH = 45


class AuditAction(str, Enum):
    """Privileged mutations worth recording."""

    USER_CREATE = "user.create"
    USER_UPDATE = "user.update"
    USER_DELETE = "user.delete"
    USER_SUSPEND = "user.suspend"
    USER_ACTIVATE = "user.activate"
    USER_BAN = "user.ban"
    USER_ROLE_CHANGE = "user.role_change"
    USER_LOGIN = "user.login"
    USER_LOGOUT = "user.logout"
    VEHICLE_CREATE = "vehicle.create"
    VEHICLE_UPDATE = "vehicle.update"
    VEHICLE_DELETE = "vehicle.delete"
    BOOKING_CREATE = "booking.create"
    BOOKING_UPDATE = "booking.update"
    BOOKING_CANCEL = "booking.cancel"
    BOOKING_CONFIRM = "booking.confirm"
    REVIEW_CREATE = "review.create"
    REVIEW_UPDATE = "review.update"
    REVIEW_DELETE = "review.delete"
    PAYMENT_UPDATE = "payment.update"
    PERMISSION_GRANT = "permission.grant"
    PERMISSION_DENY = "permission.deny"
    PERMISSION_REVOKE = "permission.revoke"


class AuditResource(str, Enum):
    USER = "User"
    VEHICLE = "Vehicle"
    BOOKING = "Booking"
    REVIEW = "Review"
    PAYMENT = "Payment"
    PERMISSION = "Permission"


_ACTION_LABELS: Mapping[AuditAction, str] = MappingProxyType(
    {
        AuditAction.USER_CREATE: "Created user",
        AuditAction.USER_UPDATE: "Updated user",
        AuditAction.USER_DELETE: "Deleted user",
        AuditAction.USER_SUSPEND: "Suspended user",
        AuditAction.USER_ACTIVATE: "Activated user",
        AuditAction.USER_BAN: "Banned user",
        AuditAction.USER_ROLE_CHANGE: "Changed user role",
        AuditAction.USER_LOGIN: "User logged in",
        AuditAction.USER_LOGOUT: "User logged out",
        AuditAction.VEHICLE_CREATE: "Created vehicle",
        AuditAction.VEHICLE_UPDATE: "Updated vehicle",
        AuditAction.VEHICLE_DELETE: "Deleted vehicle",
        AuditAction.BOOKING_CREATE: "Created booking",
        AuditAction.BOOKING_UPDATE: "Updated booking",
        AuditAction.BOOKING_CANCEL: "Cancelled booking",
        AuditAction.BOOKING_CONFIRM: "Confirmed booking",
        AuditAction.REVIEW_CREATE: "Created review",
        AuditAction.REVIEW_UPDATE: "Updated review",
        AuditAction.REVIEW_DELETE: "Deleted review",
        AuditAction.PAYMENT_UPDATE: "Updated payment",
        AuditAction.PERMISSION_GRANT: "Granted permission",
        AuditAction.PERMISSION_DENY: "Denied permission",
        AuditAction.PERMISSION_REVOKE: "Revoked permission",
    }
)


def describe_action(action: AuditAction | str) -> str:
    """Return a human-readable label, or the raw value for unknown actions."""

    try:
        return _ACTION_LABELS[AuditAction(action)]
    except ValueError:
        return str(action)


class AuditLogEntry(BaseModel):
    """Immutable audit record. ``id`` and ``created_at`` are set on append."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    actor_id: str = Field(min_length=1)
    action: AuditAction
    resource: AuditResource
    resource_id: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    ip_address: str | None = Field(default=None, max_length=MAX_IP_ADDRESS_LENGTH)
    user_agent: str | None = None
    created_at: datetime | None = None
    id: str | None = None


class AuditLogFilters(BaseModel):
    """Criteria for :meth:`AuditLogger.query`; every field is optional."""

    model_config = ConfigDict(frozen=True)

    principal_id: str | None = None
    action: AuditAction | None = None
    resource: AuditResource | None = None
    resource_id: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    limit: int = Field(DEFAULT_AUDIT_PAGE_SIZE, ge=1)
    offset: int = Field(0, ge=0)

    @model_validator(mode="after")
    def _check_date_range(self) -> AuditLogFilters:
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


@dataclass(slots=True)
class AuditLogPage:
    """A page of audit entries, newest first."""

    entries: list[AuditLogEntry]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.entries) < self.total


__all__ = [
    "AuditAction",
    "AuditLogEntry",
    "AuditLogFilters",
    "AuditLogPage",
    "AuditResource",
    "MAX_IP_ADDRESS_LENGTH",
    "describe_action",
]
