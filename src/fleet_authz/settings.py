"""Fleet authz settings (conventional Pydantic v2)."""

from __future__ import annotations

from collections.abc import Callable
from functools import lru_cache
from typing import TypeVar

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ALLOWED_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
ALLOWED_LOG_FORMATS = frozenset({"console", "json"})

DEFAULT_DATABASE_URL = "sqlite:///./fleet_authz.sqlite"
DEFAULT_AUDIT_PAGE_SIZE = 50
MAX_AUDIT_PAGE_SIZE = 500

T = TypeVar("T")


def authz_settings_config() -> SettingsConfigDict:
    """Return the standard ``BaseSettings`` config dict."""

    return SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FLEET_AUTHZ_",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
        str_strip_whitespace=True,
    )


def create_settings_accessors(
    settings_type: type[T],
) -> tuple[Callable[[], T], Callable[[], T]]:
    """Create ``get_settings`` and ``reload_settings`` helpers for a settings class."""

    @lru_cache(maxsize=1)
    def _build() -> T:
        return settings_type()

    def get_settings() -> T:
        return _build()

    def reload_settings() -> T:
        _build.cache_clear()
        return _build()

    return get_settings, reload_settings


def normalize_log_format(value: str, *, env_var: str = "FLEET_AUTHZ_LOG_FORMAT") -> str:
    normalized = value.strip().lower()
    if normalized not in ALLOWED_LOG_FORMATS:
        allowed = ", ".join(sorted(ALLOWED_LOG_FORMATS))
        raise ValueError(f"{env_var} must be one of: {allowed}.")
    return normalized


def normalize_log_level(value: str | None, *, env_var: str) -> str | None:
    if value is None:
        return None
    normalized = value.strip().upper()
    if normalized not in ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(ALLOWED_LOG_LEVELS))
        raise ValueError(f"{env_var} must be one of: {allowed}.")
    return normalized


class Settings(BaseSettings):
    """Engine settings loaded from FLEET_AUTHZ_* environment variables."""

    model_config = authz_settings_config()

    # Logging
    log_format: str = "console"
    log_level: str = "INFO"
    database_log_level: str | None = None

    # Database
    database_url: str = DEFAULT_DATABASE_URL
    database_echo: bool = False

    # Audit
    audit_default_page_size: int = Field(DEFAULT_AUDIT_PAGE_SIZE, ge=1)
    audit_max_page_size: int = Field(MAX_AUDIT_PAGE_SIZE, ge=1)

    # Authorization
    allow_degraded_checks: bool = False

    @model_validator(mode="after")
    def _finalize(self) -> Settings:
        self.log_format = normalize_log_format(self.log_format)

        normalized_log_level = normalize_log_level(
            self.log_level, env_var="FLEET_AUTHZ_LOG_LEVEL"
        )
        if normalized_log_level is None:
            raise ValueError("FLEET_AUTHZ_LOG_LEVEL must not be empty.")
        self.log_level = normalized_log_level
        self.database_log_level = normalize_log_level(
            self.database_log_level, env_var="FLEET_AUTHZ_DATABASE_LOG_LEVEL"
        )

        if not self.database_url.strip():
            raise ValueError("FLEET_AUTHZ_DATABASE_URL must not be empty.")
        if self.audit_default_page_size > self.audit_max_page_size:
            raise ValueError(
                "FLEET_AUTHZ_AUDIT_DEFAULT_PAGE_SIZE cannot exceed "
                "FLEET_AUTHZ_AUDIT_MAX_PAGE_SIZE."
            )
        return self


get_settings, reload_settings = create_settings_accessors(Settings)


__all__ = [
    "ALLOWED_LOG_FORMATS",
    "ALLOWED_LOG_LEVELS",
    "DEFAULT_AUDIT_PAGE_SIZE",
    "DEFAULT_DATABASE_URL",
    "MAX_AUDIT_PAGE_SIZE",
    "Settings",
    "get_settings",
    "normalize_log_format",
    "normalize_log_level",
    "reload_settings",
]
