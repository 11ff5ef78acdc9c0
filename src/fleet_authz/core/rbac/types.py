"""RBAC type definitions used across the engine."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Role(str, enum.Enum):
    """Closed set of principal roles, declared lowest privilege first."""

    USER = "USER"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


class Resource(str, enum.Enum):
    """Resources addressable by a permission."""

    USERS = "users"
    VEHICLES = "vehicles"
    BOOKINGS = "bookings"
    REVIEWS = "reviews"
    PAYMENTS = "payments"
    PERMISSIONS = "permissions"
    AUDIT_LOGS = "audit_logs"


class Action(str, enum.Enum):
    """Actions a permission can name; ``MANAGE`` covers every other action."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"


@dataclass(frozen=True)
class PermissionDef:
    """Static permission definition."""

    key: str
    resource: Resource
    action: Action
    label: str


@dataclass(frozen=True)
class RoleDef:
    """Static role definition: hierarchy position plus display metadata."""

    role: Role
    level: int
    name: str
    description: str
