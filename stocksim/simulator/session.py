"""Trading session — wires market, account, random source and save file together.

This is everything the interactive front end needs besides I/O: seeding the
market, restoring the saved account, the first-run bootstrap, advancing the
clock between rounds, dashboard numbers, and saving on exit.
"""

from __future__ import annotations

import numpy as np

from config.settings import Settings, get_settings
from stocksim.core.constants import DEFAULT_ACCOUNT_NAME, DEFAULT_TICKS_PER_ROUND
from stocksim.core.logging import get_logger
from stocksim.core.types import AccountSummary, PositionView
from stocksim.simulator import price_model
from stocksim.simulator.account import Account
from stocksim.simulator.market import Market, load_catalog
from stocksim.simulator.persistence import PersistenceStore

log = get_logger(__name__)


class TradingSession:
    """One run of the simulator for one account.

    Typical lifecycle::

        session = TradingSession.open("Alice", seed=7)
        session.advance()
        session.account.buy(session.market, "AAPL", 10)
        summary = session.summary()
        session.close()
    """

    def __init__(
        self,
        market: Market,
        account: Account,
        store: PersistenceStore,
        rng: np.random.Generator,
        ticks_per_round: int = DEFAULT_TICKS_PER_ROUND,
    ) -> None:
        self.market = market
        self.account = account
        self.store = store
        self.rng = rng
        self._ticks_per_round = ticks_per_round

    @classmethod
    def open(
        cls,
        name: str = DEFAULT_ACCOUNT_NAME,
        settings: Settings | None = None,
        *,
        seed: int | None = None,
    ) -> TradingSession:
        """Seed the market, restore the saved account, and fund a first run.

        A missing record, or one with no cash and no holdings, starts the
        account with ``settings.demo_balance``.  *seed* overrides
        ``settings.random_seed``.
        """
        settings = settings or get_settings()
        name = name.strip() or DEFAULT_ACCOUNT_NAME

        market = Market.from_catalog(load_catalog(settings.catalog_file))
        rng = price_model.make_rng(seed if seed is not None else settings.random_seed)
        store = PersistenceStore(settings.save_file)
        account = Account(name)

        record = store.load()
        if record is not None:
            account.restore(record)

        if record is None or record.is_empty:
            account.add_funds(settings.demo_balance)
            log.info("demo_funds_granted", account=name, amount=settings.demo_balance)

        log.info(
            "session_opened",
            account=name,
            save_file=str(store.path),
            n_securities=len(market),
            balance=round(account.balance, 4),
        )
        return cls(
            market=market,
            account=account,
            store=store,
            rng=rng,
            ticks_per_round=settings.ticks_per_round,
        )

    # ── Rounds ──────────────────────────────────────────────────

    def advance(self, times: int | None = None) -> None:
        """Tick the market; defaults to one round's worth of ticks."""
        self.market.tick(self.rng, self._ticks_per_round if times is None else times)

    # ── Reporting ───────────────────────────────────────────────

    def summary(self) -> AccountSummary:
        return AccountSummary(
            name=self.account.name,
            cash=self.account.balance,
            market_value=self.account.market_value(self.market),
            unrealized_pnl=self.account.unrealized_pnl(self.market),
            realized_pnl=self.account.realized_pnl,
        )

    def positions(self) -> list[PositionView]:
        """Holdings marked to market, sorted by symbol; unlisted symbols are omitted."""
        views: list[PositionView] = []
        for holding in self.account.portfolio:
            price = self.market.price_of(holding.symbol)
            if price is None:
                continue
            views.append(
                PositionView(
                    symbol=holding.symbol,
                    quantity=holding.quantity,
                    avg_cost=holding.avg_cost,
                    price=price,
                ),
            )
        return views

    # ── Persistence ─────────────────────────────────────────────

    def save(self) -> None:
        self.store.save(self.account)

    def close(self) -> None:
        """Save on exit."""
        self.save()
        log.info("session_closed", account=self.account.name)
