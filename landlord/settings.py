"""Ledger configuration via environment variables."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .multipliers import DEFAULT_MAX_BOMBS


class LedgerSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LEDGER_")

    max_bombs: int = Field(DEFAULT_MAX_BOMBS, ge=0, le=30, description="Highest bomb count accepted for one round.")
    data_file: str = "data/ledger.json"
    log_level: str = "INFO"
    log_dir: Optional[str] = None
    cors_origins: str = "*"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return normalized

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> LedgerSettings:
    return LedgerSettings()
