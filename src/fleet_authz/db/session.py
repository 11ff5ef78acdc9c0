"""Transaction scope shared by the SQLAlchemy-backed stores."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from fleet_authz.common.logging import log_context
from fleet_authz.core.rbac.errors import StoreError

logger = logging.getLogger(__name__)


@contextmanager
def store_transaction(
    session_factory: sessionmaker[Session],
    *,
    store: str,
    operation: str,
) -> Iterator[Session]:
    """Run one store operation in its own transaction.

    Commits on success. Any SQLAlchemy failure is rolled back and re-raised as
    :class:`StoreError`, so callers never see driver exceptions.
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.warning(
            "store.error",
            extra=log_context(store=store, operation=operation, error=type(exc).__name__),
        )
        raise StoreError(f"{store} store {operation} failed", operation=operation) from exc
    except BaseException:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = ["store_transaction"]
