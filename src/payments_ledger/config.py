from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    workers: int = Field(default=1, alias="LEDGER_WORKERS")

    rejects_path: Optional[Path] = Field(default=None, alias="LEDGER_REJECTS_PATH")

    def validate_required(self) -> None:
        if self.workers < 1:
            raise ValueError("LEDGER_WORKERS must be >= 1")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"LOG_LEVEL is not a valid level: {self.log_level}")


@lru_cache
def load_settings() -> Settings:
    settings = Settings()
    settings.validate_required()
    return settings
