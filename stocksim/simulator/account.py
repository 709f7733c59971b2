"""Trading account — owns cash and realized P&L, enforces trading rules.

Every trade is validated in full before any state changes: a call that
raises leaves balance, realized P&L and holdings exactly as they were.

Cash impact::

    BUY  : balance -= price * qty
    SELL : balance += price * qty,  realized_pnl += (price - avg_cost) * qty
"""

from __future__ import annotations

import math
import numbers
from datetime import datetime, timezone

from uuid_extensions import uuid7

from stocksim.core.constants import BALANCE_EPSILON
from stocksim.core.exceptions import (
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidQuantityError,
    SymbolNotFoundError,
)
from stocksim.core.logging import get_logger
from stocksim.core.types import AccountRecord, Fill, Holding, Quote, Side
from stocksim.simulator.ledger import Ledger
from stocksim.simulator.market import Market

log = get_logger(__name__)


def _check_quantity(qty: object) -> int:
    if isinstance(qty, bool) or not isinstance(qty, numbers.Integral) or qty <= 0:
        raise InvalidQuantityError(
            f"Quantity must be a positive whole number, got {qty!r}",
            context={"quantity": qty},
        )
    return int(qty)


def _require_quote(market: Market, symbol: str) -> Quote:
    quote = market.get(symbol)
    if quote is None:
        raise SymbolNotFoundError(
            f"Symbol not found: {symbol}",
            context={"symbol": symbol},
        )
    return quote


class Account:
    """Single-user cash account with an average-cost ledger.

    Usage::

        account = Account("Player")
        account.add_funds(10_000)
        account.buy(market, "AAPL", 10)
        account.sell(market, "AAPL", 4)
        equity = account.total_equity(market)
    """

    def __init__(self, name: str, ledger: Ledger | None = None) -> None:
        self._name = name
        self._balance = 0.0
        self._realized_pnl = 0.0
        self._ledger = ledger if ledger is not None else Ledger()

    # ── Read-only views ─────────────────────────────────────────

    @property
    def name(self) -> str:
        return self._name

    @property
    def balance(self) -> float:
        return self._balance

    @property
    def realized_pnl(self) -> float:
        return self._realized_pnl

    @property
    def portfolio(self) -> list[Holding]:
        """Copies of the current holdings, sorted by symbol."""
        return self._ledger.holdings()

    # ── Cash ────────────────────────────────────────────────────

    def add_funds(self, amount: float) -> float:
        """Deposit *amount* and return the new balance.

        Raises:
            InvalidAmountError: If *amount* is not a positive finite number.
        """
        if (
            isinstance(amount, bool)
            or not isinstance(amount, numbers.Real)
            or not math.isfinite(amount)
            or amount <= 0
        ):
            raise InvalidAmountError(
                f"Amount must be positive, got {amount!r}",
                context={"amount": amount},
            )
        self._balance += float(amount)
        log.info("funds_added", account=self._name, amount=amount, balance=round(self._balance, 4))
        return self._balance

    # ── Trading ─────────────────────────────────────────────────

    def buy(self, market: Market, symbol: str, qty: int) -> Fill:
        """Buy *qty* units of *symbol* at the current market price.

        Raises:
            InvalidQuantityError: If *qty* is not a positive integer.
            SymbolNotFoundError: If the market does not list *symbol*.
            InsufficientBalanceError: If the cost exceeds the cash balance.
        """
        qty = _check_quantity(qty)
        quote = _require_quote(market, symbol)

        try:
            cost = quote.price * qty
        except OverflowError:
            cost = math.inf
        if cost > self._balance + BALANCE_EPSILON:
            raise InsufficientBalanceError(
                f"Insufficient balance: need {cost:.2f} but only {self._balance:.2f} available",
                context={"symbol": symbol, "cost": cost, "balance": self._balance},
            )

        self._ledger.buy(symbol, qty, quote.price)
        # epsilon tolerance may let cost overshoot by rounding noise
        self._balance = max(0.0, self._balance - cost)

        fill = Fill(
            fill_id=str(uuid7()),
            timestamp=datetime.now(timezone.utc),
            symbol=symbol,
            side=Side.BUY,
            quantity=qty,
            price=quote.price,
            cash_delta=-cost,
            realized_pnl=0.0,
        )
        log.info(
            "trade_executed",
            account=self._name,
            fill_id=fill.fill_id,
            side=fill.side.value,
            symbol=symbol,
            quantity=qty,
            price=round(quote.price, 6),
            notional=round(fill.notional, 4),
            balance=round(self._balance, 4),
        )
        return fill

    def sell(self, market: Market, symbol: str, qty: int) -> Fill:
        """Sell *qty* units of *symbol* at the current market price.

        Raises:
            InvalidQuantityError: If *qty* is not a positive integer.
            SymbolNotFoundError: If the market does not list *symbol*.
            InsufficientPositionError: If fewer than *qty* units are held.
        """
        qty = _check_quantity(qty)
        quote = _require_quote(market, symbol)

        profit = self._ledger.sell(symbol, qty, quote.price)
        proceeds = quote.price * qty
        self._balance += proceeds
        self._realized_pnl += profit

        fill = Fill(
            fill_id=str(uuid7()),
            timestamp=datetime.now(timezone.utc),
            symbol=symbol,
            side=Side.SELL,
            quantity=qty,
            price=quote.price,
            cash_delta=proceeds,
            realized_pnl=profit,
        )
        log.info(
            "trade_executed",
            account=self._name,
            fill_id=fill.fill_id,
            side=fill.side.value,
            symbol=symbol,
            quantity=qty,
            price=round(quote.price, 6),
            notional=round(fill.notional, 4),
            realized_pnl=round(profit, 4),
            balance=round(self._balance, 4),
        )
        return fill

    # ── Valuation ───────────────────────────────────────────────

    def market_value(self, market: Market) -> float:
        return self._ledger.market_value(market.price_of)

    def unrealized_pnl(self, market: Market) -> float:
        return self._ledger.unrealized_pnl(market.price_of)

    def total_equity(self, market: Market) -> float:
        """Cash plus the market value of every holding."""
        return self._balance + self._ledger.market_value(market.price_of)

    # ── Persistence bridge ──────────────────────────────────────

    def to_record(self) -> AccountRecord:
        return AccountRecord(
            balance=self._balance,
            realized_pnl=self._realized_pnl,
            holdings=self._ledger.holdings(),
        )

    def restore(self, record: AccountRecord) -> None:
        """Replace all state with *record*.

        Holdings are replayed through :meth:`Ledger.buy` so the cost basis
        is computed exactly as in live trading; a symbol listed twice is
        blended like two purchases.

        Raises:
            ValueError: If the record carries a negative balance or a
                holding with non-positive quantity or cost.  Nothing is
                changed in that case.
        """
        if record.balance < 0:
            msg = f"record balance must be non-negative, got {record.balance}"
            raise ValueError(msg)
        for holding in record.holdings:
            if holding.quantity <= 0 or holding.avg_cost <= 0:
                msg = (
                    f"record holding {holding.symbol} must have positive quantity "
                    f"and cost, got {holding.quantity} @ {holding.avg_cost}"
                )
                raise ValueError(msg)

        self._ledger.clear()
        for holding in record.holdings:
            self._ledger.buy(holding.symbol, holding.quantity, holding.avg_cost)
        self._balance = record.balance
        self._realized_pnl = record.realized_pnl

        log.info(
            "account_restored",
            account=self._name,
            balance=round(self._balance, 4),
            realized_pnl=round(self._realized_pnl, 4),
            n_holdings=len(self._ledger),
        )
