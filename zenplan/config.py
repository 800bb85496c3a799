from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    api_base_url: str = Field("", alias="ZENPLAN_API_BASE_URL")
    backend_token: str = Field("", alias="ZENPLAN_BACKEND_TOKEN")
    storage_url: str = Field("sqlite:///zenplan_local.db", alias="ZENPLAN_STORAGE_URL")
    default_theme: str = Field("light", alias="ZENPLAN_DEFAULT_THEME")
    remote_timeout: float = Field(10.0, alias="ZENPLAN_REMOTE_TIMEOUT")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def remote_enabled(self) -> bool:
        return bool(self.api_base_url.strip() and self.backend_token.strip())


_settings: ClientSettings | None = None


def get_settings() -> ClientSettings:
    global _settings
    if _settings is None:
        _settings = ClientSettings()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
