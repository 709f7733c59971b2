"""Stochastic price process — advances one security by one tick.

Step model::

    noise  ~ Normal(0, volatility)
    change = PRICE_DRIFT + noise
    p'     = clamp(p * (1 + change), PRICE_FLOOR, p * MAX_TICK_GROWTH)

New instrument kinds register their own :class:`BasePriceModel` in
``_PRICE_MODELS``; the market looks models up by ``SecurityKind`` and never
needs to change.
"""

from __future__ import annotations

import numpy as np

from stocksim.core.constants import MAX_TICK_GROWTH, PRICE_DRIFT, PRICE_FLOOR
from stocksim.core.interfaces import BasePriceModel
from stocksim.core.logging import get_logger
from stocksim.core.types import Security, SecurityKind

log = get_logger(__name__)


class RandomWalkPriceModel(BasePriceModel):
    """Gaussian multiplicative random walk with a small upward drift."""

    def __init__(
        self,
        drift: float = PRICE_DRIFT,
        floor: float = PRICE_FLOOR,
        max_growth: float = MAX_TICK_GROWTH,
    ) -> None:
        if floor <= 0:
            msg = f"floor must be positive, got {floor}"
            raise ValueError(msg)
        if max_growth < 1.0:
            msg = f"max_growth must be >= 1.0, got {max_growth}"
            raise ValueError(msg)
        self._drift = drift
        self._floor = floor
        self._max_growth = max_growth

    def next_price(
        self,
        price: float,
        volatility: float,
        rng: np.random.Generator,
    ) -> float:
        noise = float(rng.normal(0.0, volatility))
        proposed = price * (1.0 + self._drift + noise)
        # floor wins over the cap when a sub-floor price is ticked
        return max(self._floor, min(proposed, price * self._max_growth))


_PRICE_MODELS: dict[SecurityKind, BasePriceModel] = {
    SecurityKind.EQUITY: RandomWalkPriceModel(),
}


def get_price_model(kind: SecurityKind) -> BasePriceModel:
    """Return the price model registered for *kind*.

    Raises:
        KeyError: If no model handles *kind*.
    """
    model = _PRICE_MODELS.get(kind)
    if model is None:
        msg = f"No price model registered for security kind: {kind.value}"
        raise KeyError(msg)
    return model


def register_price_model(kind: SecurityKind, model: BasePriceModel) -> None:
    """Install (or replace) the price model for *kind*."""
    _PRICE_MODELS[kind] = model
    log.info("price_model_registered", kind=kind.value, model=type(model).__name__)


def update(security: Security, rng: np.random.Generator) -> float:
    """Advance *security* by one tick in place and return its new price."""
    model = get_price_model(security.kind)
    old_price = security.price
    security.price = model.next_price(old_price, security.volatility, rng)
    log.debug(
        "price_updated",
        symbol=security.symbol,
        old_price=round(old_price, 6),
        new_price=round(security.price, 6),
    )
    return security.price


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Create the run's random source.  A fixed *seed* makes runs reproducible."""
    return np.random.default_rng(seed)


def spawn_streams(rng: np.random.Generator, n: int) -> list[np.random.Generator]:
    """Split *rng* into *n* independent, deterministic child streams.

    Used when securities are ticked in parallel: each one draws from its
    own stream so the outcome does not depend on scheduling.
    """
    if n < 0:
        msg = f"n must be non-negative, got {n}"
        raise ValueError(msg)
    return rng.spawn(n)
