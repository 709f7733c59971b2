"""Tests for the simulated market and its seed catalog."""

from __future__ import annotations

import threading
from pathlib import Path

import numpy as np
import pytest

from stocksim.core.constants import MAX_TICK_GROWTH, PRICE_FLOOR
from stocksim.core.exceptions import DuplicateSymbolError
from stocksim.core.types import Quote, Security
from stocksim.simulator.market import Market, load_catalog
from stocksim.simulator.price_model import make_rng


class TestCatalog:
    def test_default_catalog(self, catalog: list[Security]) -> None:
        symbols = [s.symbol for s in catalog]
        assert len(symbols) == 8
        assert set(symbols) == {"AAPL", "GOOG", "TSLA", "INFY", "RELI", "NVDA", "TCS", "HDFB"}
        aapl = next(s for s in catalog if s.symbol == "AAPL")
        assert aapl.price == 185.0
        assert aapl.volatility == 0.01

    def test_missing_securities_key(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("stocks: []\n", encoding="utf-8")
        with pytest.raises(ValueError, match="securities"):
            load_catalog(path)

    def test_entry_missing_field(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("securities:\n  - symbol: ABC\n    price: 10\n", encoding="utf-8")
        with pytest.raises(ValueError, match="volatility"):
            load_catalog(path)

    def test_entry_invalid_price(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text(
            "securities:\n  - symbol: ABC\n    price: -1\n    volatility: 0.1\n",
            encoding="utf-8",
        )
        with pytest.raises(ValueError, match="positive"):
            load_catalog(path)

    def test_symbol_normalized(self, tmp_path: Path) -> None:
        path = tmp_path / "lower.yaml"
        path.write_text(
            "securities:\n  - symbol: ' abc '\n    price: 10\n    volatility: 0.1\n",
            encoding="utf-8",
        )
        (sec,) = load_catalog(path)
        assert sec.symbol == "ABC"
        assert sec.name == " abc "


class TestRegistration:
    def test_add_and_get(self) -> None:
        market = Market()
        market.add_security(Security(symbol="ABC", name="Abc Corp.", price=10.0, volatility=0.1))
        quote = market.get("ABC")
        assert quote == Quote(symbol="ABC", name="Abc Corp.", price=10.0)
        assert "ABC" in market
        assert len(market) == 1

    def test_duplicate_rejected(self, market: Market) -> None:
        before = market.get("AAPL")
        with pytest.raises(DuplicateSymbolError):
            market.add_security(Security(symbol="AAPL", name="Imposter", price=1.0, volatility=0.1))
        assert market.get("AAPL") == before
        assert len(market) == 8

    def test_unknown_symbol_returns_none(self, market: Market) -> None:
        assert market.get("MSFT") is None
        assert market.price_of("MSFT") is None

    def test_quote_is_snapshot(self, small_market: Market, securities: dict[str, Security]) -> None:
        quote = small_market.get("AAPL")
        securities["AAPL"].price = 999.0
        assert quote is not None
        assert quote.price == 185.0
        assert small_market.price_of("AAPL") == 999.0


class TestListing:
    def test_list_sorted_by_symbol(self, market: Market) -> None:
        listing = market.list()
        assert [q.symbol for q in listing] == sorted(q.symbol for q in listing)
        assert market.symbols == [q.symbol for q in listing]

    def test_list_does_not_mutate(self, market: Market) -> None:
        assert market.list() == market.list()


class TestTick:
    def test_tick_moves_every_price_within_bounds(self, market: Market, rng: np.random.Generator) -> None:
        before = {q.symbol: q.price for q in market.list()}
        market.tick(rng)
        after = {q.symbol: q.price for q in market.list()}
        assert after.keys() == before.keys()
        for sym, old in before.items():
            assert PRICE_FLOOR <= after[sym] <= old * MAX_TICK_GROWTH
        assert after != before

    def test_tick_times(self, small_market: Market) -> None:
        one = Market.from_catalog(
            [Security(symbol=q.symbol, name=q.name, price=q.price, volatility=0.02) for q in small_market.list()],
        )
        two = Market.from_catalog(
            [Security(symbol=q.symbol, name=q.name, price=q.price, volatility=0.02) for q in small_market.list()],
        )
        rng_a, rng_b = make_rng(5), make_rng(5)
        one.tick(rng_a, times=3)
        for _ in range(3):
            two.tick(rng_b)
        assert one.list() == two.list()

    def test_tick_zero_is_noop(self, market: Market, rng: np.random.Generator) -> None:
        before = market.list()
        market.tick(rng, times=0)
        assert market.list() == before

    def test_tick_negative_rejected(self, market: Market, rng: np.random.Generator) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            market.tick(rng, times=-1)

    def test_seeded_ticks_reproducible(self, catalog: list[Security]) -> None:
        a = Market.from_catalog(catalog)
        b = Market.from_catalog(_clone_catalog(catalog))
        a.tick(make_rng(11), times=25)
        b.tick(make_rng(11), times=25)
        assert a.list() == b.list()

    def test_concurrent_reads_during_ticks(self, market: Market) -> None:
        errors: list[Exception] = []

        def ticker() -> None:
            rng = make_rng(1)
            for _ in range(200):
                market.tick(rng)

        def reader() -> None:
            try:
                for _ in range(200):
                    for quote in market.list():
                        assert quote.price >= PRICE_FLOOR
            except Exception as exc:  # noqa: BLE001
                errors.append(exc)

        threads = [threading.Thread(target=ticker), threading.Thread(target=reader)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert errors == []


def _clone_catalog(catalog: list[Security]) -> list[Security]:
    return [
        Security(symbol=s.symbol, name=s.name, price=s.price, volatility=s.volatility, kind=s.kind)
        for s in catalog
    ]
