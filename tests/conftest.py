"""Shared pytest fixtures: an in-memory SQLite database per test."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from fleet_authz.db.engine import build_engine, build_session_factory, create_schema
from fleet_authz.features.audit import AuditLogger, SqlAuditStore
from fleet_authz.features.rbac import PermissionService, SqlOverrideStore
from fleet_authz.settings import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, database_url="sqlite://")


@pytest.fixture
def engine(settings: Settings) -> Iterator[Engine]:
    engine = build_engine(settings)
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return build_session_factory(engine)


@pytest.fixture
def override_store(session_factory: sessionmaker[Session]) -> SqlOverrideStore:
    return SqlOverrideStore(session_factory)


@pytest.fixture
def permission_service(override_store: SqlOverrideStore) -> PermissionService:
    return PermissionService(override_store)


@pytest.fixture
def audit_store(session_factory: sessionmaker[Session]) -> SqlAuditStore:
    return SqlAuditStore(session_factory)


@pytest.fixture
def audit_logger(audit_store: SqlAuditStore) -> AuditLogger:
    return AuditLogger(audit_store)
