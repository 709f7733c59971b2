"""Virtual trading simulator — price model, market, ledger, account and persistence."""

from stocksim.simulator.account import Account
from stocksim.simulator.ledger import Ledger
from stocksim.simulator.market import Market, load_catalog
from stocksim.simulator.persistence import PersistenceStore
from stocksim.simulator.price_model import RandomWalkPriceModel, make_rng
from stocksim.simulator.session import TradingSession

__all__ = [
    "Account",
    "Ledger",
    "Market",
    "PersistenceStore",
    "RandomWalkPriceModel",
    "TradingSession",
    "load_catalog",
    "make_rng",
]
