"""``fleet-authz db`` commands."""

from __future__ import annotations

import typer

from fleet_authz.db.engine import build_engine, create_schema
from fleet_authz.db.migrations_runner import run_migrations

from .shared import resolve_settings

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Create or migrate the override and audit tables.",
)


@app.command(name="init", help="Create missing tables directly from the models.")
def init(ctx: typer.Context) -> None:
    settings = resolve_settings(ctx)
    engine = build_engine(settings)
    try:
        create_schema(engine)
    finally:
        engine.dispose()
    typer.echo("Schema ready.")


@app.command(name="upgrade", help="Apply Alembic migrations.")
def upgrade(
    ctx: typer.Context,
    revision: str = typer.Argument("head", help="Alembic revision to upgrade to."),
) -> None:
    run_migrations(resolve_settings(ctx), revision=revision)
    typer.echo(f"Migrated to {revision}.")
