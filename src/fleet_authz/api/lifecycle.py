"""Attach the engine's services to a FastAPI application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from sqlalchemy.orm import sessionmaker

from fleet_authz.db.engine import build_engine
from fleet_authz.features.audit import AuditLogger, SqlAuditStore
from fleet_authz.features.rbac import PermissionService, SqlOverrideStore
from fleet_authz.settings import Settings, get_settings

from .errors import register_authz_exception_handlers

logger = logging.getLogger(__name__)


def _resolve_app(app_or_request: FastAPI | Request) -> FastAPI:
    if isinstance(app_or_request, FastAPI):
        return app_or_request
    return app_or_request.app


def init_authz(app: FastAPI, settings: Settings | None = None) -> None:
    """Build the engine, stores and services onto ``app.state``.

    Calling it again disposes the previous engine first.
    """
    settings = settings or get_settings()

    existing_engine = getattr(app.state, "authz_engine", None)
    if existing_engine is not None:
        existing_engine.dispose()

    engine = build_engine(settings)
    session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    app.state.authz_engine = engine
    app.state.authz_sessionmaker = session_factory
    app.state.permission_service = PermissionService(
        SqlOverrideStore(session_factory),
        allow_degraded=settings.allow_degraded_checks,
    )
    app.state.audit_logger = AuditLogger(
        SqlAuditStore(session_factory),
        default_page_size=settings.audit_default_page_size,
        max_page_size=settings.audit_max_page_size,
    )
    register_authz_exception_handlers(app)
    logger.info(
        "authz.init",
        extra={
            "database_backend": engine.url.get_backend_name(),
            "allow_degraded_checks": settings.allow_degraded_checks,
        },
    )


def shutdown_authz(app: FastAPI) -> None:
    engine = getattr(app.state, "authz_engine", None)
    if engine is not None:
        engine.dispose()
    app.state.authz_engine = None
    app.state.authz_sessionmaker = None
    app.state.permission_service = None
    app.state.audit_logger = None


def get_permission_service_from_app(app_or_request: FastAPI | Request) -> PermissionService:
    service = getattr(_resolve_app(app_or_request).state, "permission_service", None)
    if service is None:
        raise RuntimeError("Authorization not initialized. Call init_authz(app, ...) at startup.")
    return service


def get_audit_logger_from_app(app_or_request: FastAPI | Request) -> AuditLogger:
    audit_logger = getattr(_resolve_app(app_or_request).state, "audit_logger", None)
    if audit_logger is None:
        raise RuntimeError("Authorization not initialized. Call init_authz(app, ...) at startup.")
    return audit_logger


__all__ = [
    "get_audit_logger_from_app",
    "get_permission_service_from_app",
    "init_authz",
    "shutdown_authz",
]
