"""Fixed thresholds of the accounting contract."""

from __future__ import annotations

EPSILON = 1e-8
DUST_THRESHOLD = 1e-6
PNL_MIN_INVESTED = 0.01

FIAT_SYMBOL = "USD"
LP_SYMBOL_PREFIX = "LP"
LP_MOVE_MARKER = "Moved to LP"
POOL_CREATION_PREFIX = "Pool Creation:"

STABLE_SYMBOLS = ("USD", "USDT", "USDC", "DAI", "BUSD")
USD_PEGGED_SYMBOLS = ("USD", "USDT", "USDC", "DAI")
USD_STABLE_GROUP = "USD Stablecoins"

__all__ = [
    "EPSILON",
    "DUST_THRESHOLD",
    "PNL_MIN_INVESTED",
    "FIAT_SYMBOL",
    "LP_SYMBOL_PREFIX",
    "LP_MOVE_MARKER",
    "POOL_CREATION_PREFIX",
    "STABLE_SYMBOLS",
    "USD_PEGGED_SYMBOLS",
    "USD_STABLE_GROUP",
]
