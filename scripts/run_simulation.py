"""Headless simulator runner — advances the market and logs the account each round.

Usage:
    python scripts/run_simulation.py
    python scripts/run_simulation.py --rounds 20 --seed 7
    python scripts/run_simulation.py --name Alice --buy AAPL:10 --buy TSLA:5
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config.settings import get_settings
from stocksim.core.exceptions import StockSimError
from stocksim.core.logging import get_logger, setup_logging
from stocksim.simulator.session import TradingSession

settings = get_settings()
setup_logging(json_output=settings.log_json, level=settings.log_level)
log = get_logger(__name__)


def _parse_order(raw: str) -> tuple[str, int]:
    symbol, sep, qty = raw.partition(":")
    if not sep:
        msg = f"order must look like SYMBOL:QTY, got {raw!r}"
        raise argparse.ArgumentTypeError(msg)
    try:
        return symbol.strip().upper(), int(qty)
    except ValueError as exc:
        msg = f"order quantity must be an integer, got {qty!r}"
        raise argparse.ArgumentTypeError(msg) from exc


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Virtual Stock Portfolio Simulator")
    parser.add_argument("--name", type=str, default="Player", help="Account name")
    parser.add_argument(
        "--rounds",
        type=int,
        default=10,
        help="Rounds to simulate (default: 10)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (default: STOCKSIM_RANDOM_SEED or unseeded)",
    )
    parser.add_argument(
        "--buy",
        type=_parse_order,
        action="append",
        default=[],
        metavar="SYMBOL:QTY",
        help="Market order placed before the first round (repeatable)",
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Do not write the save file on exit",
    )
    return parser.parse_args()


def main() -> int:
    """Entry point."""
    args = parse_args()
    session = TradingSession.open(args.name, settings, seed=args.seed)

    for symbol, qty in args.buy:
        try:
            session.account.buy(session.market, symbol, qty)
        except StockSimError as exc:
            log.warning("order_rejected", symbol=symbol, quantity=qty, error=str(exc))

    for round_no in range(1, args.rounds + 1):
        session.advance()
        summary = session.summary()
        log.info(
            "round_completed",
            round=round_no,
            cash=round(summary.cash, 2),
            market_value=round(summary.market_value, 2),
            unrealized_pnl=round(summary.unrealized_pnl, 2),
            realized_pnl=round(summary.realized_pnl, 2),
            total_equity=round(summary.total_equity, 2),
        )

    if not args.no_save:
        try:
            session.close()
        except StockSimError as exc:
            log.error("save_failed", error=str(exc))
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
