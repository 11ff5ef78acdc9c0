"""Engine and session factory helpers."""

from __future__ import annotations

from typing import Protocol

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .metadata import Base


class DatabaseSettings(Protocol):
    database_url: str
    database_echo: bool


def _is_sqlite_memory(url: URL) -> bool:
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def build_engine(settings: DatabaseSettings) -> Engine:
    """Create an engine for ``settings.database_url``.

    In-memory SQLite shares one connection so every session sees the same
    database.
    """
    url = make_url(settings.database_url)
    kwargs: dict[str, object] = {"echo": settings.database_echo}
    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_sqlite_memory(url):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True
    return create_engine(url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


def create_schema(engine: Engine) -> None:
    """Create every engine table that does not exist yet."""

    from . import models  # noqa: F401

    Base.metadata.create_all(engine)


__all__ = ["DatabaseSettings", "build_engine", "build_session_factory", "create_schema"]
