"""
Application settings, read from the environment and an optional .env file.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_DATA_DIR = Path(__file__).parent / "data"


class Settings(BaseSettings):
    """Stack analyzer settings (environment variables use the STACK_ prefix)"""

    # Directory or http(s) base URL holding categories.json and supplements.json
    catalog_source: str = str(DEFAULT_DATA_DIR)

    # Saved stacks
    stacks_file: str = "saved_stacks.json"

    log_level: str = "INFO"

    # Remote catalog requests
    request_timeout: float = 10.0
    max_retries: int = 3

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="STACK_",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
