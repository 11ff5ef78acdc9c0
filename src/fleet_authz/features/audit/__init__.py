"""Append-only audit trail for privileged mutations."""

from .schemas import (
    AuditAction,
    AuditLogEntry,
    AuditLogFilters,
    AuditLogPage,
    AuditResource,
    describe_action,
)
from .service import AuditLogger, client_address, request_info
from .store import AuditStore, SqlAuditStore

__all__ = [
    "AuditAction",
    "AuditLogEntry",
    "AuditLogFilters",
    "AuditLogPage",
    "AuditLogger",
    "AuditResource",
    "AuditStore",
    "SqlAuditStore",
    "client_address",
    "describe_action",
    "request_info",
]
