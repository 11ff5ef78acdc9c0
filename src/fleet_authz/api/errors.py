"""Exception handlers that translate engine errors to HTTP responses."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeAlias, cast

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.responses import Response

from fleet_authz.common.logging import log_context
from fleet_authz.core.rbac.errors import InvalidPermissionError, StoreError

HttpExceptionHandler: TypeAlias = Callable[[Request, Exception], Response | Awaitable[Response]]

logger = logging.getLogger(__name__)


def _handle_invalid_permission(request: Request, exc: InvalidPermissionError) -> Response:
    """Unknown permission identifiers are caller bugs: HTTP 400."""

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "permission": str(exc.permission)},
    )


def _handle_store_error(request: Request, exc: StoreError) -> Response:
    """Store outages surface as HTTP 503 without leaking driver details."""

    logger.warning(
        "authz.store.unavailable",
        extra=log_context(path=str(request.url.path), operation=exc.operation),
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Authorization store unavailable"},
    )


def register_authz_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(
        InvalidPermissionError,
        cast(HttpExceptionHandler, _handle_invalid_permission),
    )
    app.add_exception_handler(
        StoreError,
        cast(HttpExceptionHandler, _handle_store_error),
    )


__all__ = ["register_authz_exception_handlers"]
