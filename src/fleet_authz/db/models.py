"""Persistence models for permission overrides and the audit trail."""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Boolean, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .metadata import Base
from .mixins import CreatedAtMixin, TimestampMixin, ULIDPrimaryKeyMixin


class PermissionOverride(ULIDPrimaryKeyMixin, TimestampMixin, Base):
    """Per-principal grant (``granted=True``) or denial of one permission."""

    __tablename__ = "permission_overrides"
    __table_args__ = (
        UniqueConstraint(
            "principal_id",
            "permission",
            name="uq_permission_overrides_principal_permission",
        ),
    )

    principal_id: Mapped[str] = mapped_column(String(191), nullable=False, index=True)
    permission: Mapped[str] = mapped_column(String(64), nullable=False)
    granted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class AuditLog(ULIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """Append-only record of a privileged mutation."""

    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_resource_resource_id", "resource", "resource_id"),
    )

    actor_id: Mapped[str] = mapped_column(String(191), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(64), nullable=False)
    resource: Mapped[str] = mapped_column(String(32), nullable=False)
    resource_id: Mapped[str | None] = mapped_column(String(191), nullable=True)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text(), nullable=True)


__all__ = ["AuditLog", "PermissionOverride"]
