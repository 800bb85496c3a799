from __future__ import annotations

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field("sqlite+aiosqlite:///./zenplan.db", alias="DATABASE_URL")
    backend_session_secret: str = Field(..., alias="BACKEND_SESSION_SECRET")
    super_admin_emails_raw: str = Field("", alias="SUPER_ADMIN_EMAILS")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def super_admin_emails(self) -> List[str]:
        return [email.strip().lower() for email in self.super_admin_emails_raw.split(",") if email.strip()]


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
