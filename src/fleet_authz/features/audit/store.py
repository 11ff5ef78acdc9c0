"""Audit store contract and its SQLAlchemy implementation."""

from __future__ import annotations

from typing import Protocol

from pydantic import ValidationError
from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session, sessionmaker

from fleet_authz.core.rbac.errors import StoreError
from fleet_authz.db.models import AuditLog
from fleet_authz.db.session import store_transaction
from fleet_authz.db.types import utc_now

from .schemas import AuditLogEntry, AuditLogFilters


class AuditStore(Protocol):
    """Append-only persistence for audit entries.

    Implementations raise :class:`StoreError` for any backend failure.
    """

    def append_audit_log(self, entry: AuditLogEntry) -> AuditLogEntry: ...

    def query_audit_logs(self, filters: AuditLogFilters) -> tuple[list[AuditLogEntry], int]: ...


def _to_entry(row: AuditLog) -> AuditLogEntry:
    try:
        return AuditLogEntry.model_validate(row)
    except ValidationError as exc:
        raise StoreError("Audit store returned a malformed row", operation="read") from exc


def _apply_filters(
    statement: Select[tuple[AuditLog]], filters: AuditLogFilters
) -> Select[tuple[AuditLog]]:
    if filters.principal_id:
        statement = statement.where(AuditLog.actor_id == filters.principal_id)
    if filters.action is not None:
        statement = statement.where(AuditLog.action == filters.action.value)
    if filters.resource is not None:
        statement = statement.where(AuditLog.resource == filters.resource.value)
    if filters.resource_id:
        statement = statement.where(AuditLog.resource_id == filters.resource_id)
    if filters.start_date is not None:
        statement = statement.where(AuditLog.created_at >= filters.start_date)
    if filters.end_date is not None:
        statement = statement.where(AuditLog.created_at <= filters.end_date)
    return statement


class SqlAuditStore:
    """Audit store backed by the ``audit_logs`` table."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def append_audit_log(self, entry: AuditLogEntry) -> AuditLogEntry:
        with store_transaction(self._session_factory, store="audit", operation="append") as session:
            row = AuditLog(
                actor_id=entry.actor_id,
                action=entry.action.value,
                resource=entry.resource.value,
                resource_id=entry.resource_id,
                details=dict(entry.details),
                ip_address=entry.ip_address,
                user_agent=entry.user_agent,
                created_at=entry.created_at or utc_now(),
            )
            session.add(row)
            session.flush()
            return _to_entry(row)

    def query_audit_logs(self, filters: AuditLogFilters) -> tuple[list[AuditLogEntry], int]:
        with store_transaction(self._session_factory, store="audit", operation="query") as session:
            filtered = _apply_filters(select(AuditLog), filters)
            total = session.scalar(select(func.count()).select_from(filtered.subquery())) or 0
            ordered = filtered.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            rows = session.scalars(ordered.offset(filters.offset).limit(filters.limit))
            return [_to_entry(row) for row in rows], total


__all__ = ["AuditStore", "SqlAuditStore"]
