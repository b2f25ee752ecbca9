"""Application settings."""

from functools import lru_cache
import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "testsys-status"
    store_backend: Literal["memory", "postgres"] = "memory"
    database_url: str = ""
    log_level: str = "INFO"
    conflict_max_retries: int = Field(default=3, ge=0)
    conflict_backoff_s: float = Field(default=0.05, ge=0.0)

    model_config = SettingsConfigDict(
        env_prefix="TESTSYS_",
        extra="ignore",
        env_file=(PROJECT_ROOT / ".env", PROJECT_ROOT / ".env.local"),
        env_file_encoding="utf-8",
    )

    def resolved_database_url(self) -> str:
        return self.database_url or os.getenv("DATABASE_URL", "")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
