"""Record and query the audit trail."""

from __future__ import annotations

import ipaddress
import json
import logging
from collections.abc import Mapping
from typing import Any

from fleet_authz.common.logging import log_context
from fleet_authz.db.types import utc_now
from fleet_authz.settings import DEFAULT_AUDIT_PAGE_SIZE, MAX_AUDIT_PAGE_SIZE

from .schemas import MAX_IP_ADDRESS_LENGTH, AuditLogEntry, AuditLogFilters, AuditLogPage
from .store import AuditStore

logger = logging.getLogger(__name__)


def _normalise_details(details: Mapping[str, Any] | None) -> dict[str, Any]:
    if not details:
        return {}
    # Sorted keys keep retried entries byte-identical.
    serialised = json.dumps(dict(details), sort_keys=True, separators=(",", ":"), default=str)
    return json.loads(serialised)


def client_address(value: str | None) -> str | None:
    """Return ``value`` in canonical form if it is an IPv4 or IPv6 address."""

    if not value:
        return None
    try:
        address = str(ipaddress.ip_address(value.strip()))
    except ValueError:
        return None
    # IPv6 scope ids are unbounded; the column holds 45 characters.
    return address if len(address) <= MAX_IP_ADDRESS_LENGTH else None


def request_info(headers: Mapping[str, str]) -> tuple[str | None, str | None]:
    """Return ``(ip_address, user_agent)`` from request headers.

    The client address is the first ``X-Forwarded-For`` hop, falling back to
    ``X-Real-IP``. Both headers are client-controlled, so anything that does
    not parse as an IP address is discarded.
    """
    lowered = {key.lower(): value for key, value in headers.items()}
    ip_address: str | None = None
    forwarded = lowered.get("x-forwarded-for")
    if forwarded:
        ip_address = client_address(forwarded.split(",")[0])
    if ip_address is None:
        ip_address = client_address(lowered.get("x-real-ip"))
    return ip_address, lowered.get("user-agent") or None


class AuditLogger:
    """Append-only recorder over an :class:`AuditStore`.

    ``record`` never raises: audit failures are logged and must not abort the
    caller's already-completed mutation. ``query`` performs no authorization;
    callers gate it behind ``audit_logs:read``.
    """

    def __init__(
        self,
        store: AuditStore,
        *,
        default_page_size: int = DEFAULT_AUDIT_PAGE_SIZE,
        max_page_size: int = MAX_AUDIT_PAGE_SIZE,
    ) -> None:
        if default_page_size <= 0 or max_page_size < default_page_size:
            raise ValueError("page sizes must satisfy 0 < default_page_size <= max_page_size")
        self._store = store
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size

    @property
    def store(self) -> AuditStore:
        return self._store

    @staticmethod
    def request_info(headers: Mapping[str, str]) -> tuple[str | None, str | None]:
        return request_info(headers)

    def record(self, entry: AuditLogEntry | Mapping[str, Any]) -> AuditLogEntry | None:
        """Persist ``entry`` and return the stored copy, or ``None`` on failure.

        A mapping's ``ip_address`` that is not a valid address is dropped
        rather than failing the whole entry.
        """

        try:
            if isinstance(entry, AuditLogEntry):
                candidate = entry
            else:
                values = dict(entry)
                if values.get("ip_address") is not None:
                    values["ip_address"] = client_address(str(values["ip_address"]))
                candidate = AuditLogEntry.model_validate(values)
            prepared = candidate.model_copy(
                update={
                    "details": _normalise_details(candidate.details),
                    "created_at": candidate.created_at or utc_now(),
                    "id": None,
                }
            )
            stored = self._store.append_audit_log(prepared)
        except Exception:
            logger.exception(
                "audit.record.failed",
                extra=log_context(
                    principal_id=_field(entry, "actor_id"),
                    action=_field(entry, "action"),
                    resource=_field(entry, "resource"),
                ),
            )
            return None

        logger.debug(
            "audit.record",
            extra=log_context(
                principal_id=stored.actor_id,
                action=stored.action.value,
                resource=stored.resource.value,
                resource_id=stored.resource_id,
            ),
        )
        return stored

    def query(self, filters: AuditLogFilters | None = None, **criteria: Any) -> AuditLogPage:
        """Return a page of entries, newest first.

        Pass either a prepared :class:`AuditLogFilters` or its fields as
        keyword arguments. Raises ``ValueError`` for a limit above the
        configured maximum and :class:`StoreError` when the store fails.
        """
        if filters is None:
            criteria.setdefault("limit", self._default_page_size)
            filters = AuditLogFilters(**criteria)
        else:
            if "limit" not in filters.model_fields_set:
                criteria.setdefault("limit", self._default_page_size)
            if criteria:
                filters = AuditLogFilters(**{**filters.model_dump(), **criteria})
        if filters.limit > self._max_page_size:
            raise ValueError(f"limit cannot exceed {self._max_page_size}")

        entries, total = self._store.query_audit_logs(filters)
        return AuditLogPage(
            entries=entries,
            total=total,
            limit=filters.limit,
            offset=filters.offset,
        )


def _field(entry: AuditLogEntry | Mapping[str, Any], name: str) -> Any:
    if isinstance(entry, Mapping):
        value = entry.get(name)
    else:
        value = getattr(entry, name, None)
    return getattr(value, "value", value)


__all__ = ["AuditLogger", "client_address", "request_info"]
