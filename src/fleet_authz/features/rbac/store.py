"""Override store contract and its SQLAlchemy implementation."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import Any, Protocol

from pydantic import ValidationError
from sqlalchemy import Select, delete, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from fleet_authz.core.rbac.errors import StoreError
from fleet_authz.db.mixins import generate_ulid
from fleet_authz.db.models import PermissionOverride
from fleet_authz.db.session import store_transaction
from fleet_authz.db.types import utc_now

from .schemas import PermissionOverrideRecord

_UPSERT_INSERTS: dict[str, Callable[..., Any]] = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class OverrideStore(Protocol):
    """Persistence operations the resolver needs for per-principal overrides.

    Implementations must keep at most one row per ``(principal_id, permission)``
    and raise :class:`StoreError` for any backend failure.
    """

    def find_override(
        self, principal_id: str, permission: str
    ) -> PermissionOverrideRecord | None: ...

    def upsert_override(
        self, principal_id: str, permission: str, granted: bool
    ) -> PermissionOverrideRecord: ...

    def delete_override(self, principal_id: str, permission: str) -> bool: ...

    def list_overrides(self, principal_id: str) -> list[PermissionOverrideRecord]: ...


def _to_record(row: PermissionOverride) -> PermissionOverrideRecord:
    try:
        return PermissionOverrideRecord.model_validate(row)
    except ValidationError as exc:
        raise StoreError("Override store returned a malformed row", operation="read") from exc


class SqlOverrideStore:
    """Override store backed by the ``permission_overrides`` table.

    Each call runs in its own short transaction, so one instance can be shared
    across threads.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def _transaction(self, operation: str) -> AbstractContextManager[Session]:
        return store_transaction(self._session_factory, store="override", operation=operation)

    @staticmethod
    def _pair_query(principal_id: str, permission: str) -> Select[tuple[PermissionOverride]]:
        return select(PermissionOverride).where(
            PermissionOverride.principal_id == principal_id,
            PermissionOverride.permission == permission,
        )

    def find_override(
        self, principal_id: str, permission: str
    ) -> PermissionOverrideRecord | None:
        with self._transaction("find") as session:
            row = session.scalars(self._pair_query(principal_id, permission)).one_or_none()
            return _to_record(row) if row is not None else None

    def upsert_override(
        self, principal_id: str, permission: str, granted: bool
    ) -> PermissionOverrideRecord:
        with self._transaction("upsert") as session:
            insert_factory = _UPSERT_INSERTS.get(session.get_bind().dialect.name)
            if insert_factory is not None:
                self._upsert_on_conflict(session, insert_factory, principal_id, permission, granted)
            else:
                self._upsert_portable(session, principal_id, permission, granted)
            row = session.scalars(self._pair_query(principal_id, permission)).one()
            return _to_record(row)

    def _upsert_on_conflict(
        self,
        session: Session,
        insert_factory: Callable[..., Any],
        principal_id: str,
        permission: str,
        granted: bool,
    ) -> None:
        now = utc_now()
        statement = insert_factory(PermissionOverride).values(
            id=generate_ulid(),
            principal_id=principal_id,
            permission=permission,
            granted=granted,
            created_at=now,
            updated_at=now,
        )
        statement = statement.on_conflict_do_update(
            index_elements=["principal_id", "permission"],
            set_={
                "granted": statement.excluded.granted,
                "updated_at": statement.excluded.updated_at,
            },
        )
        session.execute(statement)

    def _upsert_portable(
        self, session: Session, principal_id: str, permission: str, granted: bool
    ) -> None:
        query = self._pair_query(principal_id, permission)
        row = session.scalars(query.with_for_update()).one_or_none()
        if row is not None:
            row.granted = granted
            session.flush()
            return
        try:
            with session.begin_nested():
                session.add(
                    PermissionOverride(
                        principal_id=principal_id,
                        permission=permission,
                        granted=granted,
                    )
                )
        except IntegrityError:
            # Lost the race to a concurrent insert of the same pair.
            row = session.scalars(query).one()
            row.granted = granted
            session.flush()

    def delete_override(self, principal_id: str, permission: str) -> bool:
        with self._transaction("delete") as session:
            result = session.execute(
                delete(PermissionOverride).where(
                    PermissionOverride.principal_id == principal_id,
                    PermissionOverride.permission == permission,
                )
            )
            return bool(result.rowcount)

    def list_overrides(self, principal_id: str) -> list[PermissionOverrideRecord]:
        with self._transaction("list") as session:
            rows = session.scalars(
                select(PermissionOverride)
                .where(PermissionOverride.principal_id == principal_id)
                .order_by(PermissionOverride.permission)
            )
            return [_to_record(row) for row in rows]


__all__ = ["OverrideStore", "SqlOverrideStore"]
