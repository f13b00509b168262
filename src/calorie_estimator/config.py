"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    inference_provider: str = "openai"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-flash"
    temperature: float = 0.2
    seed: int = 42
    recompute_dish_totals: bool = True
    history_backend: str = "file"
    history_dir: Path = Path.home() / ".calorie_estimator"
    history_limit: int = 5
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    device_id: str = "default"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def require(value: str | None, name: str) -> str:
    """Return a configured value or fail with the setting's env name."""
    if not value:
        raise ValueError(f"{name.upper()} must be set")
    return value
