from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .db.session import sqlite_url

DB_FILENAME = "inventory.sqlite3"


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    DATA_DIR: Path = Path("app_data")
    DB_PATH: Path | None = None
    DB_URL: str | None = Field(default=None, validation_alias=AliasChoices("DB_URL", "DATABASE_URL"))
    TZ: str = "Atlantic/Reykjavik"

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "text"

    IMPORT_ID_POLICY: Literal["preserve", "reassign"] = "preserve"
    REPORT_TITLE: str = "School equipment list"
    PDF_FONT_PATH: Path | None = None

    @field_validator("LOG_FORMAT", "IMPORT_ID_POLICY", mode="before")
    @classmethod
    def lower_case_choice(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value

    @property
    def db_path(self) -> Path:
        """``DB_PATH`` when set, otherwise ``inventory.sqlite3`` inside ``DATA_DIR``."""

        return self.DB_PATH or self.DATA_DIR / DB_FILENAME

    @property
    def database_url(self) -> str:
        return self.DB_URL or sqlite_url(self.db_path)


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()


__all__ = ["AppSettings", "get_settings"]
