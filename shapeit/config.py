"""Process configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    shapeit_env: str = "development"
    shapeit_log_level: str = "warning"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
