"""Value objects exchanged with RBAC callers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from fleet_authz.core.rbac.types import Role


@dataclass(frozen=True)
class Decision:
    """Outcome of an authorization check.

    ``reason`` is always set on a denial and never on an allow.
    """

    allowed: bool
    reason: str | None = None

    def __post_init__(self) -> None:
        if self.allowed and self.reason is not None:
            raise ValueError("An allow decision cannot carry a reason")
        if not self.allowed and not self.reason:
            raise ValueError("A deny decision requires a reason")

    def __bool__(self) -> bool:
        return self.allowed

    @classmethod
    def allow(cls) -> Decision:
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> Decision:
        return cls(allowed=False, reason=reason)


@dataclass(frozen=True)
class CheckOptions:
    """Optional context for a permission check.

    ``own_resource`` marks the target record as owned by the principal.
    ``target_role`` is the role of the user being acted on, for ``users:*``
    permissions.
    """

    own_resource: bool = False
    target_role: Role | None = None


class PermissionOverrideRecord(BaseModel):
    """Stored override for one ``(principal_id, permission)`` pair."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    principal_id: str
    permission: str
    granted: bool
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


__all__ = ["CheckOptions", "Decision", "PermissionOverrideRecord"]
