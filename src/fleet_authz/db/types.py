"""SQLAlchemy custom column types.

- UTCDateTime: timezone-aware datetimes normalized to UTC, also on SQLite
  where the driver hands back naive values.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy.types import DateTime, TypeDecorator

__all__ = ["UTCDateTime", "utc_now"]


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime normalized to UTC."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect):
        if isinstance(value, datetime):
            return _as_utc(value)
        return value

    def process_result_value(self, value: Any, dialect):
        if isinstance(value, datetime):
            return _as_utc(value)
        return value
