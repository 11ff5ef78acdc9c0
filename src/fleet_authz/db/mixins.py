"""Reusable SQLAlchemy mixins for engine models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from ulid import ULID

from .types import UTCDateTime, utc_now

__all__ = [
    "CreatedAtMixin",
    "TimestampMixin",
    "ULIDPrimaryKeyMixin",
    "generate_ulid",
]


def generate_ulid() -> str:
    """Return a lexicographically sortable ULID string."""

    return str(ULID())


class ULIDPrimaryKeyMixin:
    """Mixin that supplies a ULID-backed primary key column."""

    @declared_attr.directive
    def id(cls) -> Mapped[str]:  # noqa: N805 - SQLAlchemy declared attr
        return mapped_column(
            "id",
            String(26),
            primary_key=True,
            default=generate_ulid,
        )


class CreatedAtMixin:
    """Mixin for append-only rows: creation timestamp only."""

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utc_now,
        index=True,
    )


class TimestampMixin:
    """Mixin that records created/updated timestamps as timezone-aware datetimes."""

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )
