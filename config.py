"""Application settings loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central config: every value has a sensible single-node default."""

    model_config = SettingsConfigDict(env_prefix="CASEFILE_")

    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Record store backing
    data_dir: str = Field(
        default="data",
        description="Directory holding the record document; created on first use.",
    )
    database_filename: str = Field(default="database.json")

    @property
    def database_path(self) -> Path:
        return Path(self.data_dir) / self.database_filename


@lru_cache
def get_settings() -> Settings:
    return Settings()
