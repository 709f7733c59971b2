"""Custom exception hierarchy for the stock simulator."""

from __future__ import annotations

from typing import Any


class StockSimError(Exception):
    """Base exception for all simulator errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context: dict[str, Any] = context or {}


# ── Market Layer ─────────────────────────────────────────────────

class SymbolNotFoundError(StockSimError):
    """Trade requested against a symbol the market does not list."""


class DuplicateSymbolError(StockSimError):
    """A security with this symbol is already registered."""


# ── Account Layer ────────────────────────────────────────────────

class InvalidAmountError(StockSimError):
    """Funding amount is not positive."""


class InvalidQuantityError(StockSimError):
    """Trade quantity is not a positive whole number."""


class InsufficientBalanceError(StockSimError):
    """Not enough cash to pay for the order."""


class InsufficientPositionError(StockSimError):
    """Sell quantity exceeds the held quantity, or nothing is held."""


# ── Persistence Layer ────────────────────────────────────────────

class PersistenceUnavailableError(StockSimError):
    """The save target could not be written."""


class MalformedRecordError(StockSimError):
    """Persisted record is structurally unreadable."""
