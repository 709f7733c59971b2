"""Simulator settings — loaded from environment variables via .env file."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from stocksim.core.constants import (
    DEFAULT_SAVE_FILE,
    DEFAULT_TICKS_PER_ROUND,
    DEMO_BALANCE,
)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_CATALOG_FILE = Path(__file__).resolve().parent / "markets.yaml"


class Settings(BaseSettings):
    """All configuration flows through this class. Never read env vars directly."""

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        env_prefix="STOCKSIM_",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Environment ──────────────────────────────────────────────
    env: Literal["dev", "prod"] = "dev"

    # ── Files ────────────────────────────────────────────────────
    save_file: Path = Path(DEFAULT_SAVE_FILE)
    catalog_file: Path = DEFAULT_CATALOG_FILE

    # ── Simulation ───────────────────────────────────────────────
    random_seed: int | None = None
    ticks_per_round: int = Field(default=DEFAULT_TICKS_PER_ROUND, ge=1)
    demo_balance: float = Field(default=DEMO_BALANCE, gt=0)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool = True

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Unknown log level: {value}"
            raise ValueError(msg)
        return level

    @model_validator(mode="after")
    def _check_prod_seed(self) -> "Settings":
        """Production runs must not silently replay a fixed price path."""
        if self.env == "prod" and self.random_seed is not None:
            msg = "STOCKSIM_RANDOM_SEED must be unset in production"
            raise ValueError(msg)
        return self


_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Singleton settings loader — reads .env once, reuses thereafter."""
    global _settings_instance  # noqa: PLW0603
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
