"""Run the packaged Alembic migrations against the configured database."""

from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config

from fleet_authz.settings import Settings, get_settings

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def alembic_config(settings: Settings | None = None) -> Config:
    resolved = settings or get_settings()
    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    alembic_cfg.attributes["settings"] = resolved
    alembic_cfg.attributes["configure_logger"] = False
    # ConfigParser treats % as interpolation; escape to preserve URL encoding.
    alembic_cfg.set_main_option("sqlalchemy.url", resolved.database_url.replace("%", "%%"))
    return alembic_cfg


def run_migrations(settings: Settings | None = None, *, revision: str = "head") -> None:
    command.upgrade(alembic_config(settings), revision)


__all__ = ["MIGRATIONS_DIR", "alembic_config", "run_migrations"]
