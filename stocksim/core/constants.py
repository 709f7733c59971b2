"""System-wide constants. All magic numbers and strings live here."""

from __future__ import annotations

# ── Price Model ──────────────────────────────────────────────────
PRICE_DRIFT = 0.0005        # tiny positive drift per tick
PRICE_FLOOR = 1.0           # lowest price a tick may produce
MAX_TICK_GROWTH = 1.25      # a tick may rise at most 25% above the pre-tick price

# ── Trading ──────────────────────────────────────────────────────
BALANCE_EPSILON = 1e-9      # tolerance when comparing cost against cash

# ── Account Bootstrap ────────────────────────────────────────────
DEMO_BALANCE = 10_000.00
DEFAULT_ACCOUNT_NAME = "Player"

# ── Persistence ──────────────────────────────────────────────────
DEFAULT_SAVE_FILE = "portfolio.sav"
RECORD_FLOAT_PRECISION = 8  # fractional digits for persisted floats

# ── Session ──────────────────────────────────────────────────────
DEFAULT_TICKS_PER_ROUND = 1
