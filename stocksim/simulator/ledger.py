"""Position ledger — per-symbol average-cost holdings for one account.

Cost-basis rules::

    BUY  avg' = (avg * held + price * qty) / (held + qty)
    SELL profit = (price - avg) * qty      avg unchanged, flat holdings removed

The ledger knows nothing about cash.  The owning :class:`Account` validates
quantities and balances first and only then calls in here.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace

from stocksim.core.exceptions import InsufficientPositionError
from stocksim.core.logging import get_logger
from stocksim.core.types import Holding

log = get_logger(__name__)

PriceLookup = Callable[[str], float | None]


class Ledger:
    """Average-cost position book.

    Holdings handed out by :meth:`get` and :meth:`holdings` are copies;
    mutating them does not affect the ledger.
    """

    def __init__(self) -> None:
        self._holdings: dict[str, Holding] = {}

    # ── Trades ──────────────────────────────────────────────────

    def buy(self, symbol: str, qty: int, price: float) -> Holding:
        """Add *qty* units at *price*, blending the average cost.

        Returns:
            A copy of the resulting holding.

        Raises:
            ValueError: If *qty* or *price* is non-positive.
        """
        if qty <= 0:
            msg = f"buy quantity must be positive, got {qty}"
            raise ValueError(msg)
        if price <= 0:
            msg = f"buy price must be positive, got {price}"
            raise ValueError(msg)

        holding = self._holdings.get(symbol)
        if holding is None:
            holding = Holding(symbol=symbol, quantity=qty, avg_cost=price)
            self._holdings[symbol] = holding
        else:
            new_qty = holding.quantity + qty
            holding.avg_cost = (holding.cost_basis + price * qty) / new_qty
            holding.quantity = new_qty

        log.debug(
            "ledger_buy",
            symbol=symbol,
            qty=qty,
            price=price,
            quantity=holding.quantity,
            avg_cost=round(holding.avg_cost, 6),
        )
        return replace(holding)

    def sell(self, symbol: str, qty: int, price: float) -> float:
        """Remove *qty* units at *price* and return the realized profit.

        Raises:
            InsufficientPositionError: If nothing is held or fewer than
                *qty* units are held.
            ValueError: If *qty* is non-positive.
        """
        if qty <= 0:
            msg = f"sell quantity must be positive, got {qty}"
            raise ValueError(msg)

        holding = self._holdings.get(symbol)
        held = holding.quantity if holding is not None else 0
        if holding is None or held < qty:
            raise InsufficientPositionError(
                f"Not enough shares to sell: {symbol} held {held}, requested {qty}",
                context={"symbol": symbol, "held": held, "requested": qty},
            )

        profit = (price - holding.avg_cost) * qty
        holding.quantity -= qty
        if holding.quantity == 0:
            del self._holdings[symbol]

        log.debug(
            "ledger_sell",
            symbol=symbol,
            qty=qty,
            price=price,
            profit=round(profit, 6),
            remaining=held - qty,
        )
        return profit

    def clear(self) -> None:
        self._holdings.clear()

    # ── Valuation ───────────────────────────────────────────────

    def market_value(self, price_lookup: PriceLookup) -> float:
        """Sum of ``quantity * price``; unpriced symbols count as 0."""
        total = 0.0
        for symbol, holding in self._holdings.items():
            price = price_lookup(symbol)
            if price is not None:
                total += price * holding.quantity
        return total

    def unrealized_pnl(self, price_lookup: PriceLookup) -> float:
        """Sum of ``(price - avg_cost) * quantity``; unpriced symbols count as 0."""
        total = 0.0
        for symbol, holding in self._holdings.items():
            price = price_lookup(symbol)
            if price is not None:
                total += (price - holding.avg_cost) * holding.quantity
        return total

    # ── Accessors ───────────────────────────────────────────────

    def get(self, symbol: str) -> Holding | None:
        holding = self._holdings.get(symbol)
        return replace(holding) if holding is not None else None

    def holdings(self) -> list[Holding]:
        """Copies of every holding, sorted by symbol."""
        return [replace(self._holdings[sym]) for sym in sorted(self._holdings)]

    def __len__(self) -> int:
        return len(self._holdings)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._holdings
