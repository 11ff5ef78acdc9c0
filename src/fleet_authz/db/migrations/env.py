"""Alembic environment configuration."""

from __future__ import annotations

from logging.config import fileConfig

from alembic import context

from fleet_authz.db.engine import build_engine
from fleet_authz.db.metadata import Base
from fleet_authz.settings import Settings

config = context.config

if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name)


# Import models so Base.metadata is populated
def _import_models() -> None:
    import fleet_authz.db.models  # noqa: F401


_import_models()
target_metadata = Base.metadata


def _build_settings() -> Settings:
    provided = config.attributes.get("settings")
    if isinstance(provided, Settings):
        return provided
    override_url = config.get_main_option("sqlalchemy.url")
    if override_url:
        return Settings(_env_file=None, database_url=override_url.replace("%%", "%"))
    return Settings()


def run_migrations_offline() -> None:
    settings = _build_settings()
    context.configure(
        url=settings.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    existing_connection = config.attributes.get("connection")
    if existing_connection is not None:
        context.configure(
            connection=existing_connection,
            target_metadata=target_metadata,
            render_as_batch=True,
        )
        with context.begin_transaction():
            context.run_migrations()
        return

    engine = build_engine(_build_settings())
    try:
        with engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                render_as_batch=True,
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
