"""Database schema, engine helpers and migrations for the engine's stores."""

from .engine import build_engine, build_session_factory, create_schema
from .metadata import NAMING_CONVENTION, Base, metadata
from .models import AuditLog, PermissionOverride
from .types import UTCDateTime, utc_now

__all__ = [
    "AuditLog",
    "Base",
    "NAMING_CONVENTION",
    "PermissionOverride",
    "UTCDateTime",
    "build_engine",
    "build_session_factory",
    "create_schema",
    "metadata",
    "utc_now",
]
