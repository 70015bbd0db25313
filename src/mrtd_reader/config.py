"""Configuration helpers for the MRTD reader."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ReaderSettings(BaseSettings):
    """Environment-driven settings for the document reading pipeline."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    service_name: str = Field(default="mrtd-reader", alias="MRTD_SERVICE_NAME")
    log_level: str = Field(default="INFO", alias="MRTD_LOG_LEVEL")
    log_format: str | None = Field(default=None, alias="MRTD_LOG_FORMAT")
    database_url: str = Field(
        default="sqlite+aiosqlite:///./passports.db", alias="MRTD_DATABASE_URL"
    )
    database_echo: bool = Field(default=False, alias="MRTD_DATABASE_ECHO")
    expiry_warning_days: int = Field(default=90, alias="MRTD_EXPIRY_WARNING_DAYS")
    required_data_groups: list[str] = Field(
        default_factory=lambda: ["DG1"], alias="MRTD_REQUIRED_DATA_GROUPS"
    )
    field_layout: str = Field(default="check-digit-inclusive-v2", alias="MRTD_FIELD_LAYOUT")


@lru_cache
def get_settings() -> ReaderSettings:
    """Return a cached settings instance."""

    return ReaderSettings()
