"""Shared pytest fixtures for the simulator suite."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from config.settings import DEFAULT_CATALOG_FILE, Settings
from stocksim.core.types import Security
from stocksim.simulator.market import Market, load_catalog
from stocksim.simulator.price_model import make_rng


class FixedNoise:
    """Stand-in random source whose ``normal`` always returns *value*."""

    def __init__(self, value: float) -> None:
        self.value = value
        self.calls: list[tuple[float, float]] = []

    def normal(self, loc: float, scale: float) -> float:
        self.calls.append((loc, scale))
        return self.value


@pytest.fixture
def catalog() -> list[Security]:
    return load_catalog(DEFAULT_CATALOG_FILE)


@pytest.fixture
def market(catalog: list[Security]) -> Market:
    return Market.from_catalog(catalog)


@pytest.fixture
def rng() -> np.random.Generator:
    return make_rng(42)


@pytest.fixture
def securities() -> dict[str, Security]:
    """Securities kept by reference so tests can move prices directly."""
    return {
        "AAPL": Security(symbol="AAPL", name="Apple Inc.", price=185.0, volatility=0.01),
        "TSLA": Security(symbol="TSLA", name="Tesla Inc.", price=240.0, volatility=0.02),
        "INFY": Security(symbol="INFY", name="Infosys Ltd.", price=20.5, volatility=0.015),
    }


@pytest.fixture
def small_market(securities: dict[str, Security]) -> Market:
    return Market.from_catalog(securities.values())


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(_env_file=None, save_file=tmp_path / "portfolio.sav")


@pytest.fixture
def fixed_noise() -> type[FixedNoise]:
    return FixedNoise
