"""Vulcan settings (pydantic-settings, ``VULCAN_*`` environment variables)."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vulcan_db.models import Role

ALLOWED_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
ALLOWED_LOG_FORMATS = frozenset({"console", "json"})

DEFAULT_DATABASE_URL = "sqlite:///./data/vulcan.sqlite"
DEFAULT_AUTH_USER_HEADER = "X-Vulcan-User-Id"


def normalize_log_format(value: str, *, env_var: str = "VULCAN_LOG_FORMAT") -> str:
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


@dataclass(frozen=True, slots=True)
class NotificationSettings:
    """Notification channel toggles handed to the membership lifecycle manager."""

    smtp_enabled: bool = False
    slack_enabled: bool = False


class Settings(BaseSettings):
    """FastAPI settings loaded from VULCAN_* environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VULCAN_",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    # Core
    app_name: str = "Vulcan API"
    app_version: str = "unknown"
    log_format: str = "console"
    log_level: str = "INFO"
    access_log_enabled: bool = True

    # Database
    database_url: str = DEFAULT_DATABASE_URL
    database_echo: bool = False
    database_log_level: str | None = None
    database_pool_size: int = Field(5, ge=1)
    database_max_overflow: int = Field(10, ge=0)
    database_pool_timeout: int = Field(30, gt=0)
    database_pool_recycle: int = Field(1800, ge=0)
    database_migrate_on_startup: bool = False

    # Identity
    auth_user_header: str = DEFAULT_AUTH_USER_HEADER
    rule_unlock_min_role: Role = Role.ADMIN

    # Notifications
    smtp_enabled: bool = False
    slack_enabled: bool = False

    # ---- Validators ----

    @field_validator("rule_unlock_min_role", mode="before")
    @classmethod
    def _normalize_unlock_role(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("rule_unlock_min_role")
    @classmethod
    def _reject_bottom_role(cls, value: Role) -> Role:
        if value is Role.NONE:
            raise ValueError("VULCAN_RULE_UNLOCK_MIN_ROLE must name a grantable role.")
        return value

    @field_validator("auth_user_header")
    @classmethod
    def _require_header_name(cls, value: str) -> str:
        if not value:
            raise ValueError("VULCAN_AUTH_USER_HEADER must not be empty.")
        return value

    @model_validator(mode="after")
    def _finalize(self) -> Settings:
        self.log_format = normalize_log_format(self.log_format)

        normalized_log_level = normalize_log_level(self.log_level, env_var="VULCAN_LOG_LEVEL")
        if normalized_log_level is None:
            raise ValueError("VULCAN_LOG_LEVEL must not be empty.")
        self.log_level = normalized_log_level

        self.database_log_level = normalize_log_level(
            self.database_log_level,
            env_var="VULCAN_DATABASE_LOG_LEVEL",
        )
        return self

    def notifications(self) -> NotificationSettings:
        return NotificationSettings(
            smtp_enabled=self.smtp_enabled,
            slack_enabled=self.slack_enabled,
        )


@lru_cache(maxsize=1)
def _build() -> Settings:
    return Settings()


def get_settings() -> Settings:
    return _build()


def reload_settings() -> Settings:
    _build.cache_clear()
    return _build()


__all__ = [
    "ALLOWED_LOG_FORMATS",
    "ALLOWED_LOG_LEVELS",
    "DEFAULT_AUTH_USER_HEADER",
    "DEFAULT_DATABASE_URL",
    "NotificationSettings",
    "Settings",
    "get_settings",
    "normalize_log_format",
    "normalize_log_level",
    "reload_settings",
]
