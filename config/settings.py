"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/sessions.db")

    DEFAULT_ROUND_MINUTES: int = Field(default=30, ge=1)
    AUTO_SUBMIT_ON_EXPIRY: bool = True
    SESSION_IDLE_TTL_S: float = Field(default=900.0, ge=30.0)

    TELEMETRY_MIN_INTERVAL_S: float = Field(default=5.0, ge=0.0)
    TELEMETRY_SIMULATE: bool = False

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
