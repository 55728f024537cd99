"""Client settings (env/.env)."""

from __future__ import annotations

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for reaching the notes API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    notes_api_base_url: AnyHttpUrl = Field(
        default="https://noteapp-moei.onrender.com/api",
        alias="NOTES_API_BASE_URL",
    )
    notes_api_token: str | None = Field(default=None, alias="NOTES_API_TOKEN")

    http_timeout_seconds: float = Field(
        default=30.0,
        alias="HTTP_TIMEOUT_SECONDS",
        gt=0,
    )
