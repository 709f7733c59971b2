"""Simulated market — owns every security and drives price ticks.

The security table is private.  Callers get :class:`Quote` snapshots and a
price-lookup callable; the only way to change a price is :meth:`Market.tick`.
A single re-entrant lock serializes a full tick pass against reads, so a
timer-driven tick can never interleave with a trade's price lookup.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import numpy as np
import yaml

from stocksim.core.exceptions import DuplicateSymbolError
from stocksim.core.logging import get_logger
from stocksim.core.types import Quote, Security, SecurityKind
from stocksim.simulator import price_model

log = get_logger(__name__)


class Market:
    """Symbol-keyed collection of securities with fixed membership.

    Typical lifecycle::

        market = Market.from_catalog(load_catalog(path))
        rng = price_model.make_rng(seed=42)
        market.tick(rng)
        quote = market.get("AAPL")
    """

    def __init__(self) -> None:
        self._securities: dict[str, Security] = {}
        self._lock = threading.RLock()

    @classmethod
    def from_catalog(cls, securities: Iterable[Security]) -> Market:
        market = cls()
        for security in securities:
            market.add_security(security)
        log.info("market_seeded", n_securities=len(market))
        return market

    # ── Registration ────────────────────────────────────────────

    def add_security(self, security: Security) -> None:
        """Register *security* under its symbol.

        Raises:
            DuplicateSymbolError: If the symbol is already listed.
        """
        with self._lock:
            if security.symbol in self._securities:
                raise DuplicateSymbolError(
                    f"Symbol already listed: {security.symbol}",
                    context={"symbol": security.symbol},
                )
            self._securities[security.symbol] = security

    # ── Reads ───────────────────────────────────────────────────

    def get(self, symbol: str) -> Quote | None:
        """Return a snapshot for *symbol*, or ``None`` if it is not listed."""
        with self._lock:
            security = self._securities.get(symbol)
            return security.quote() if security is not None else None

    def price_of(self, symbol: str) -> float | None:
        """Current price of *symbol*, or ``None`` if it is not listed."""
        with self._lock:
            security = self._securities.get(symbol)
            return security.price if security is not None else None

    def list(self) -> list[Quote]:
        """All listed securities, sorted by symbol."""
        with self._lock:
            return [
                self._securities[sym].quote() for sym in sorted(self._securities)
            ]

    @property
    def symbols(self) -> list[str]:
        with self._lock:
            return sorted(self._securities)

    def __len__(self) -> int:
        return len(self._securities)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._securities

    # ── Ticking ─────────────────────────────────────────────────

    def tick(self, rng: np.random.Generator, times: int = 1) -> None:
        """Advance every listed security by *times* ticks.

        Raises:
            ValueError: If *times* is negative.
        """
        if times < 0:
            msg = f"times must be non-negative, got {times}"
            raise ValueError(msg)

        with self._lock:
            for _ in range(times):
                for security in self._securities.values():
                    price_model.update(security, rng)

        log.debug("market_ticked", times=times, n_securities=len(self))


# ── Catalog ─────────────────────────────────────────────────────


def _parse_entry(entry: Mapping[str, Any]) -> Security:
    return Security(
        symbol=str(entry["symbol"]).strip().upper(),
        name=str(entry.get("name", entry["symbol"])),
        price=float(entry["price"]),
        volatility=float(entry["volatility"]),
        kind=SecurityKind(entry.get("kind", SecurityKind.EQUITY.value)),
    )


def load_catalog(path: Path) -> list[Security]:
    """Read the seed catalog from a YAML file.

    Expected shape::

        securities:
          - symbol: AAPL
            name: Apple Inc.
            price: 185.00
            volatility: 0.010

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the file has no ``securities`` list or an entry is
            missing a field or carries an invalid value.
    """
    with path.open(encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}

    entries = raw.get("securities") if isinstance(raw, dict) else None
    if not isinstance(entries, list):
        msg = f"Catalog {path} has no 'securities' list"
        raise ValueError(msg)

    securities: list[Security] = []
    for idx, entry in enumerate(entries):
        if not isinstance(entry, dict):
            msg = f"Catalog {path} entry #{idx} is not a mapping"
            raise ValueError(msg)
        try:
            securities.append(_parse_entry(entry))
        except KeyError as exc:
            msg = f"Catalog {path} entry #{idx} is missing field {exc}"
            raise ValueError(msg) from exc

    log.debug("catalog_loaded", path=str(path), n_securities=len(securities))
    return securities
