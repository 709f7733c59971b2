"""Abstract base classes — all pluggable components implement these interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np


class BasePriceModel(ABC):
    """Interface for per-tick price processes.

    Given a security's current state and the run's random source, produce
    the next price.  Implementations must keep a single step bounded and
    strictly positive so the market never has to police them.
    """

    @abstractmethod
    def next_price(
        self,
        price: float,
        volatility: float,
        rng: np.random.Generator,
    ) -> float:
        """Return the price one tick after *price*."""
        ...
