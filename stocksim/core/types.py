"""System-wide shared types — the single source of truth for all data structures."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from stocksim.core.constants import BALANCE_EPSILON


# ── Enums ────────────────────────────────────────────────────────

class SecurityKind(str, Enum):
    EQUITY = "equity"


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


# ── Market Types ─────────────────────────────────────────────────

@dataclass
class Security:
    """A tradable instrument owned by the market.

    ``symbol``, ``name``, ``volatility`` and ``kind`` are fixed at creation;
    only ``price`` changes, and only through a market tick.
    """

    symbol: str
    name: str
    price: float
    volatility: float
    kind: SecurityKind = SecurityKind.EQUITY

    def __post_init__(self) -> None:
        if not self.symbol.strip():
            msg = "Security symbol must not be empty"
            raise ValueError(msg)
        if not (self.price > 0 and math.isfinite(self.price)):
            msg = f"Security price must be positive, got {self.price}"
            raise ValueError(msg)
        if not (self.volatility > 0 and math.isfinite(self.volatility)):
            msg = f"Security volatility must be positive, got {self.volatility}"
            raise ValueError(msg)

    def quote(self) -> Quote:
        return Quote(symbol=self.symbol, name=self.name, price=self.price)


@dataclass(frozen=True)
class Quote:
    """Immutable price snapshot handed out by the market."""

    symbol: str
    name: str
    price: float


# ── Portfolio Types ──────────────────────────────────────────────

@dataclass
class Holding:
    """Single average-cost position."""

    symbol: str
    quantity: int
    avg_cost: float

    @property
    def cost_basis(self) -> float:
        return self.avg_cost * self.quantity


@dataclass(frozen=True)
class Fill:
    """Immutable record of a single executed trade."""

    fill_id: str
    timestamp: datetime
    symbol: str
    side: Side
    quantity: int
    price: float
    cash_delta: float     # signed change to the cash balance
    realized_pnl: float   # 0.0 for buys

    def __post_init__(self) -> None:
        if self.quantity <= 0:
            msg = f"Fill quantity must be positive, got {self.quantity}"
            raise ValueError(msg)
        if self.price <= 0:
            msg = f"Fill price must be positive, got {self.price}"
            raise ValueError(msg)
        if self.timestamp.tzinfo is None:
            msg = "Fill timestamp must be timezone-aware (UTC)"
            raise ValueError(msg)

    @property
    def notional(self) -> float:
        return self.price * self.quantity


# ── Persistence Types ────────────────────────────────────────────

@dataclass
class AccountRecord:
    """Durable account state: cash, realized P&L and holdings."""

    balance: float = 0.0
    realized_pnl: float = 0.0
    holdings: list[Holding] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.holdings and self.balance <= BALANCE_EPSILON


# ── Reporting Types ──────────────────────────────────────────────

@dataclass(frozen=True)
class PositionView:
    """One holding marked to the current market price."""

    symbol: str
    quantity: int
    avg_cost: float
    price: float

    @property
    def market_value(self) -> float:
        return self.price * self.quantity

    @property
    def unrealized_pnl(self) -> float:
        return (self.price - self.avg_cost) * self.quantity


@dataclass(frozen=True)
class AccountSummary:
    """Dashboard numbers for one account at one point in time."""

    name: str
    cash: float
    market_value: float
    unrealized_pnl: float
    realized_pnl: float
    as_of: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def total_equity(self) -> float:
        return self.cash + self.market_value
