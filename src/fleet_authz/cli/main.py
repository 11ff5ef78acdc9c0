"""``fleet-authz``: inspect roles, check permissions and manage overrides."""

from __future__ import annotations

from datetime import datetime

import typer

from fleet_authz.common.logging import setup_logging
from fleet_authz.core.rbac.registry import (
    PERMISSIONS,
    ROLE_DEFINITIONS,
    coerce_role,
    normalize_permission,
)
from fleet_authz.features.audit import (
    AuditAction,
    AuditLogEntry,
    AuditResource,
    describe_action,
)
from fleet_authz.features.rbac import (
    CheckOptions,
    PermissionOverrideRecord,
    check_static,
    permissions_for_role,
)
from fleet_authz.settings import Settings, get_settings

from . import db
from .shared import CliState, Services, cli_errors, open_services

_DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M:%S%z"]

app = typer.Typer(
    add_completion=False,
    invoke_without_command=True,
    help="Fleet authorization engine CLI (roles, permissions, check, overrides, audit, db).",
)
app.add_typer(db.app, name="db")


@app.callback()
def _main(
    ctx: typer.Context,
    database_url: str | None = typer.Option(
        None,
        "--database-url",
        help="Override FLEET_AUTHZ_DATABASE_URL for this invocation.",
    ),
) -> None:
    settings = Settings(database_url=database_url) if database_url else get_settings()
    ctx.obj = CliState(settings=settings)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


@app.command(name="roles", help="List roles from lowest to highest privilege.")
def roles() -> None:
    for definition in ROLE_DEFINITIONS:
        typer.echo(
            f"{definition.level}  {definition.role.value:<12} "
            f"{definition.name}: {definition.description}"
        )


@app.command(name="permissions", help="List the permission catalog or one role's defaults.")
def permissions(
    role: str | None = typer.Option(None, "--role", help="Show the defaults for this role."),
) -> None:
    with cli_errors():
        if role is None:
            for definition in PERMISSIONS:
                typer.echo(f"{definition.key:<20} {definition.label}")
            return
        for key in sorted(permissions_for_role(coerce_role(role))):
            typer.echo(key)


@app.command(name="check", help="Decide PERMISSION for ROLE; exits 1 on deny.")
def check(
    ctx: typer.Context,
    role: str = typer.Argument(..., help="Role of the principal."),
    permission: str = typer.Argument(..., help="Permission key, e.g. bookings:read."),
    principal: str | None = typer.Option(
        None, "--principal", help="Consult this principal's overrides."
    ),
    own: bool = typer.Option(False, "--own", help="Target record belongs to the principal."),
    target_role: str | None = typer.Option(
        None, "--target-role", help="Role of the user being acted on (users:* checks)."
    ),
) -> None:
    with cli_errors():
        options = CheckOptions(
            own_resource=own,
            target_role=coerce_role(target_role) if target_role else None,
        )
        if principal is None:
            decision = check_static(role, permission, options)
        else:
            with open_services(ctx) as services:
                decision = services.permissions.check_dynamic(
                    principal, role, permission, options
                )
    if decision.allowed:
        typer.echo("allow")
        return
    typer.echo(f"deny: {decision.reason}")
    raise typer.Exit(code=1)


@app.command(name="effective", help="Show a principal's effective permissions.")
def effective(
    ctx: typer.Context,
    principal: str = typer.Argument(...),
    role: str = typer.Argument(...),
) -> None:
    with cli_errors(), open_services(ctx) as services:
        keys = services.permissions.get_effective_permissions(principal, role)
    for key in sorted(keys):
        typer.echo(key)


@app.command(name="overrides", help="List a principal's stored overrides.")
def overrides(ctx: typer.Context, principal: str = typer.Argument(...)) -> None:
    with cli_errors(), open_services(ctx) as services:
        records = services.permissions.list_overrides(principal)
    if not records:
        typer.echo("No overrides.")
        return
    for record in records:
        typer.echo(_format_override(record))


def _format_override(record: PermissionOverrideRecord) -> str:
    state = "granted" if record.granted else "denied"
    return f"{record.permission:<20} {state}"


def _record_override_change(
    services: Services,
    *,
    actor: str | None,
    action: AuditAction,
    principal: str,
    permission: str,
) -> None:
    if not actor:
        return
    services.audit.record(
        AuditLogEntry(
            actor_id=actor,
            action=action,
            resource=AuditResource.PERMISSION,
            resource_id=principal,
            details={"permission": permission, "target_user_id": principal},
        )
    )


_ACTOR_OPTION_HELP = "Principal performing the change; recorded in the audit log."


@app.command(name="grant", help="Grant PERMISSION to PRINCIPAL regardless of role.")
def grant(
    ctx: typer.Context,
    principal: str = typer.Argument(...),
    permission: str = typer.Argument(...),
    actor: str | None = typer.Option(None, "--actor", help=_ACTOR_OPTION_HELP),
) -> None:
    with cli_errors(), open_services(ctx) as services:
        record = services.permissions.grant_permission(principal, permission)
        _record_override_change(
            services,
            actor=actor,
            action=AuditAction.PERMISSION_GRANT,
            principal=principal,
            permission=record.permission,
        )
    typer.echo(f"Granted {record.permission} to {principal}.")


@app.command(name="deny", help="Deny PERMISSION to PRINCIPAL.")
def deny(
    ctx: typer.Context,
    principal: str = typer.Argument(...),
    permission: str = typer.Argument(...),
    actor: str | None = typer.Option(None, "--actor", help=_ACTOR_OPTION_HELP),
) -> None:
    with cli_errors(), open_services(ctx) as services:
        record = services.permissions.deny_permission(principal, permission)
        _record_override_change(
            services,
            actor=actor,
            action=AuditAction.PERMISSION_DENY,
            principal=principal,
            permission=record.permission,
        )
    typer.echo(f"Denied {record.permission} to {principal}.")


@app.command(name="revoke", help="Remove any override so PRINCIPAL falls back to role defaults.")
def revoke(
    ctx: typer.Context,
    principal: str = typer.Argument(...),
    permission: str = typer.Argument(...),
    actor: str | None = typer.Option(None, "--actor", help=_ACTOR_OPTION_HELP),
) -> None:
    with cli_errors(), open_services(ctx) as services:
        key = normalize_permission(permission)
        removed = services.permissions.revoke_permission(principal, key)
        if removed:
            _record_override_change(
                services,
                actor=actor,
                action=AuditAction.PERMISSION_REVOKE,
                principal=principal,
                permission=key,
            )
    if removed:
        typer.echo(f"Revoked override for {key} from {principal}.")
    else:
        typer.echo(f"No override for {key} on {principal}.")


@app.command(name="audit", help="List audit entries, newest first.")
def audit(
    ctx: typer.Context,
    principal: str | None = typer.Option(None, "--principal", help="Filter by actor."),
    action: AuditAction | None = typer.Option(None, "--action"),
    resource: AuditResource | None = typer.Option(None, "--resource"),
    resource_id: str | None = typer.Option(None, "--resource-id"),
    since: datetime | None = typer.Option(None, "--since", formats=_DATE_FORMATS),
    until: datetime | None = typer.Option(None, "--until", formats=_DATE_FORMATS),
    limit: int | None = typer.Option(None, "--limit", min=1),
    offset: int = typer.Option(0, "--offset", min=0),
) -> None:
    criteria: dict[str, object] = {
        "principal_id": principal,
        "action": action,
        "resource": resource,
        "resource_id": resource_id,
        "start_date": since,
        "end_date": until,
        "offset": offset,
    }
    if limit is not None:
        criteria["limit"] = limit
    with cli_errors(), open_services(ctx) as services:
        page = services.audit.query(**criteria)

    for entry in page.entries:
        created = entry.created_at.isoformat() if entry.created_at else "-"
        target = entry.resource.value
        if entry.resource_id:
            target = f"{target}:{entry.resource_id}"
        typer.echo(f"{created}  {entry.actor_id}  {describe_action(entry.action)}  {target}")
    shown = len(page.entries)
    footer = f"{shown} of {page.total} entries"
    if page.has_more:
        footer += f" (next: --offset {page.offset + shown})"
    typer.echo(footer)


def main() -> None:
    setup_logging(get_settings())
    app()


__all__ = ["app", "main"]
