"""Shared helpers for ``fleet-authz`` command modules."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import typer
from sqlalchemy.engine import Engine

from fleet_authz.core.rbac.errors import InvalidPermissionError, StoreError
from fleet_authz.db.engine import build_engine, build_session_factory
from fleet_authz.features.audit import AuditLogger, SqlAuditStore
from fleet_authz.features.rbac import PermissionService, SqlOverrideStore
from fleet_authz.settings import Settings, get_settings


@dataclass(frozen=True)
class CliState:
    settings: Settings


@dataclass(frozen=True)
class Services:
    engine: Engine
    permissions: PermissionService
    audit: AuditLogger


def resolve_settings(ctx: typer.Context) -> Settings:
    state = ctx.find_root().obj
    if isinstance(state, CliState):
        return state.settings
    return get_settings()


@contextmanager
def open_services(ctx: typer.Context) -> Iterator[Services]:
    """Build stores and services for one command, disposing the engine afterwards."""

    settings = resolve_settings(ctx)
    engine = build_engine(settings)
    session_factory = build_session_factory(engine)
    try:
        yield Services(
            engine=engine,
            permissions=PermissionService(
                SqlOverrideStore(session_factory),
                allow_degraded=settings.allow_degraded_checks,
            ),
            audit=AuditLogger(
                SqlAuditStore(session_factory),
                default_page_size=settings.audit_default_page_size,
                max_page_size=settings.audit_max_page_size,
            ),
        )
    finally:
        engine.dispose()


def fail(message: str, *, code: int = 1) -> typer.Exit:
    typer.echo(f"error: {message}", err=True)
    return typer.Exit(code=code)


@contextmanager
def cli_errors() -> Iterator[None]:
    """Turn engine errors into a one-line message and a non-zero exit code."""

    try:
        yield
    except InvalidPermissionError as exc:
        raise fail(str(exc), code=2) from exc
    except StoreError as exc:
        hint = "Check FLEET_AUTHZ_DATABASE_URL and run `fleet-authz db upgrade`."
        raise fail(f"{exc}. {hint}") from exc
    except ValueError as exc:
        raise fail(str(exc), code=2) from exc


__all__ = ["CliState", "Services", "cli_errors", "fail", "open_services", "resolve_settings"]
