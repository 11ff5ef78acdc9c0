from __future__ import annotations

import json
import logging

from fleet_authz.common.logging import (
    ConsoleLogFormatter,
    JsonLogFormatter,
    log_context,
    setup_logging,
)
from fleet_authz.core.rbac import Role
from fleet_authz.settings import Settings


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="fleet_authz.features.rbac.service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="rbac.override.grant",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_log_context_normalizes_role_and_drops_empty_fields() -> None:
    ctx = log_context(principal_id="usr_1", role=Role.ADMIN, permission=None, removed=True)

    assert ctx == {"principal_id": "usr_1", "role": "ADMIN", "removed": True}


def test_console_formatter_appends_sorted_extras() -> None:
    line = ConsoleLogFormatter().format(
        _record(**log_context(principal_id="usr_1", permission="bookings:delete"))
    )

    assert line.endswith(
        "rbac.override.grant permission=bookings:delete principal_id=usr_1"
    )
    assert "Z INFO " in line


def test_json_formatter_emits_one_object() -> None:
    payload = json.loads(JsonLogFormatter().format(_record(principal_id="usr_1")))

    assert payload["message"] == "rbac.override.grant"
    assert payload["service"] == "fleet-authz"
    assert payload["principal_id"] == "usr_1"
    assert payload["level"] == "INFO"


def test_setup_logging_installs_one_handler() -> None:
    root = logging.getLogger()
    previous_handlers, previous_level = root.handlers[:], root.level
    try:
        settings = Settings(_env_file=None, log_format="json", log_level="WARNING")
        setup_logging(settings)
        setup_logging(settings)

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonLogFormatter)
        assert root.level == logging.WARNING
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    finally:
        root.handlers = previous_handlers
        root.setLevel(previous_level)
