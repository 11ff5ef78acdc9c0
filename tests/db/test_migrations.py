from __future__ import annotations

from pathlib import Path

from alembic import command
from sqlalchemy import inspect

from fleet_authz.db.engine import build_engine, build_session_factory
from fleet_authz.db.migrations_runner import alembic_config, run_migrations
from fleet_authz.features.audit import AuditAction, AuditLogger, AuditResource, SqlAuditStore
from fleet_authz.features.rbac import SqlOverrideStore
from fleet_authz.settings import Settings


def _settings(tmp_path: Path) -> Settings:
    return Settings(_env_file=None, database_url=f"sqlite:///{tmp_path / 'migrated.sqlite'}")


def test_migrations_create_store_tables(tmp_path: Path) -> None:
    settings = _settings(tmp_path)

    run_migrations(settings)

    engine = build_engine(settings)
    try:
        inspector = inspect(engine)
        assert {"permission_overrides", "audit_logs"} <= set(inspector.get_table_names())
        unique_names = {
            constraint["name"]
            for constraint in inspector.get_unique_constraints("permission_overrides")
        }
        assert "uq_permission_overrides_principal_permission" in unique_names
        index_names = {index["name"] for index in inspector.get_indexes("audit_logs")}
        assert "ix_audit_logs_resource_resource_id" in index_names
    finally:
        engine.dispose()


def test_migrated_schema_serves_both_stores(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    run_migrations(settings)
    engine = build_engine(settings)
    try:
        session_factory = build_session_factory(engine)
        overrides = SqlOverrideStore(session_factory)
        overrides.upsert_override("usr_1", "payments:read", True)
        overrides.upsert_override("usr_1", "payments:read", False)
        assert [record.granted for record in overrides.list_overrides("usr_1")] == [False]

        audit = AuditLogger(SqlAuditStore(session_factory))
        stored = audit.record(
            {
                "actor_id": "root",
                "action": AuditAction.PERMISSION_DENY,
                "resource": AuditResource.PERMISSION,
                "resource_id": "usr_1",
            }
        )
        assert stored is not None
        assert audit.query(action=AuditAction.PERMISSION_DENY).total == 1
    finally:
        engine.dispose()


def test_downgrade_removes_tables(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    run_migrations(settings)

    command.downgrade(alembic_config(settings), "base")

    engine = build_engine(settings)
    try:
        tables = set(inspect(engine).get_table_names())
        assert "permission_overrides" not in tables
        assert "audit_logs" not in tables
    finally:
        engine.dispose()
