"""Tests for environment-driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from config.settings import DEFAULT_CATALOG_FILE, Settings


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for var in ("STOCKSIM_SAVE_FILE", "STOCKSIM_RANDOM_SEED", "STOCKSIM_TICKS_PER_ROUND"):
            monkeypatch.delenv(var, raising=False)
        settings = Settings(_env_file=None)
        assert settings.save_file == Path("portfolio.sav")
        assert settings.catalog_file == DEFAULT_CATALOG_FILE
        assert settings.random_seed is None
        assert settings.ticks_per_round == 1
        assert settings.demo_balance == 10_000.0

    def test_reads_prefixed_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("STOCKSIM_SAVE_FILE", str(tmp_path / "x.sav"))
        monkeypatch.setenv("STOCKSIM_RANDOM_SEED", "17")
        monkeypatch.setenv("STOCKSIM_LOG_LEVEL", "debug")
        settings = Settings(_env_file=None)
        assert settings.save_file == tmp_path / "x.sav"
        assert settings.random_seed == 17
        assert settings.log_level == "DEBUG"

    def test_rejects_bad_values(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, ticks_per_round=0)
        with pytest.raises(ValidationError):
            Settings(_env_file=None, demo_balance=-1.0)
        with pytest.raises(ValidationError, match="log level"):
            Settings(_env_file=None, log_level="chatty")

    def test_prod_forbids_fixed_seed(self) -> None:
        with pytest.raises(ValidationError, match="RANDOM_SEED"):
            Settings(_env_file=None, env="prod", random_seed=1)
        assert Settings(_env_file=None, env="prod", random_seed=None).env == "prod"
