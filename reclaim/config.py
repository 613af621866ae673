"""
Centralised config for the insight rotation engine.

This module consolidates all configuration settings, loading values from
environment variables (or a `.env` file) and providing typed, validated access
to them through a singleton `settings` object.
"""

import os
from urllib.parse import quote_plus
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings.

    Pydantic's BaseSettings will automatically load values from a `.env` file
    or from system environment variables, so the cooldown and storage backend
    can differ between environments without code changes.
    """
    # Model config: Load from a .env file, and treat env vars as case-insensitive
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", case_sensitive=False)

    # --- CORE SETTINGS ---
    # The root directory of the project (parent of the package directory).
    PROJECT_ROOT: Path = Path(__file__).parent.parent.resolve()

    # --- DATABASE (from environment) ---
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_HOST: Optional[str] = None
    POSTGRES_PORT: Optional[int] = 5432
    POSTGRES_DB: Optional[str] = None
    DATABASE_URL: Optional[str] = Field(None, validate_default=True)

    # --- SEEN STORE ---
    SEEN_BACKEND: Literal["json", "postgres"] = "json"
    SEEN_STORAGE_KEY_PREFIX: str = "reclaim/insights:seen:v1"
    INSIGHT_COOLDOWN_HOURS: float = 24.0
    # Entries older than this many cooldown windows are evicted by prune()
    SEEN_EVICTION_MULTIPLIER: int = 7

    # --- FEEDBACK SUPPRESSION ---
    FEEDBACK_NOT_RELEVANT_HOURS: float = 24.0
    FEEDBACK_COOLDOWN_DAYS: int = 7

    # --- ENGINE ---
    EVALUATION_CACHE_SIZE: int = 32

    def __init__(self, **values):
        super().__init__(**values)
        # An explicit DATABASE_URL wins; otherwise assemble one from the parts.
        if self.DATABASE_URL:
            return
        db_host = os.getenv("DB_HOST_OVERRIDE", self.POSTGRES_HOST)
        if self.POSTGRES_USER and self.POSTGRES_PASSWORD and db_host and self.POSTGRES_DB:
            # URL-encode user/pass to support special characters like @ and #
            user_enc = quote_plus(self.POSTGRES_USER)
            pass_enc = quote_plus(self.POSTGRES_PASSWORD)
            self.DATABASE_URL = (
                f"postgresql://{user_enc}:{pass_enc}@{db_host}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )

    @field_validator("INSIGHT_COOLDOWN_HOURS")
    @classmethod
    def _cooldown_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("INSIGHT_COOLDOWN_HOURS must be positive")
        return value

    @field_validator("SEEN_EVICTION_MULTIPLIER")
    @classmethod
    def _eviction_outside_cooldown(cls, value: int) -> int:
        if value < 1:
            raise ValueError("SEEN_EVICTION_MULTIPLIER must be at least 1")
        return value

    # --- DERIVED DURATIONS ---
    @property
    def cooldown_ms(self) -> int:
        return int(self.INSIGHT_COOLDOWN_HOURS * 60 * 60 * 1000)

    # --- FILE PATHS (derived from PROJECT_ROOT) ---
    @property
    def log_path(self) -> Path:
        return self.PROJECT_ROOT / "logs/insights.log"

    @property
    def rules_path(self) -> Path:
        return self.PROJECT_ROOT / "knowledge/insights.json"

    @property
    def seen_store_path(self) -> Path:
        return self.PROJECT_ROOT / "knowledge/seen"


# Create a single, importable instance of the settings
settings = Settings()
