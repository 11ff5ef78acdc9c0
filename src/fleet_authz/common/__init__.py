"""Cross-cutting helpers shared by engine features."""

from .logging import ConsoleLogFormatter, JsonLogFormatter, log_context, setup_logging

__all__ = [
    "ConsoleLogFormatter",
    "JsonLogFormatter",
    "log_context",
    "setup_logging",
]
