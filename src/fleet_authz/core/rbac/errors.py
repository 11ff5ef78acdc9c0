"""Error types raised by the authorization engine."""

from __future__ import annotations


class InvalidPermissionError(ValueError):
    """Raised when a permission identifier is not part of the catalog."""

    def __init__(self, permission: object) -> None:
        self.permission = permission
        super().__init__(f"Permission '{permission}' is not registered")


class StoreError(RuntimeError):
    """Raised when the override or audit store fails or returns malformed data."""

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        self.operation = operation
        super().__init__(message)


__all__ = ["InvalidPermissionError", "StoreError"]
