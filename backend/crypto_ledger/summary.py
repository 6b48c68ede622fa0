"""Portfolio totals and the external-funding (principal) ledger."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Sequence

from .constants import PNL_MIN_INVESTED, STABLE_SYMBOLS, USD_PEGGED_SYMBOLS, USD_STABLE_GROUP
from .models import Asset, Deposit, Transaction, Withdrawal, normalize_symbol


@dataclass(frozen=True)
class PortfolioSummary:
    total_value: float
    total_invested: float
    total_pnl: float
    pnl_percentage: float


def summarize_portfolio(assets: Iterable[Asset]) -> PortfolioSummary:
    """Sum the snapshot; assets without a market value count at cost."""

    total_value = 0.0
    total_invested = 0.0
    for asset in assets:
        total_value += asset.current_value or asset.total_invested
        total_invested += asset.total_invested
    total_pnl = total_value - total_invested
    pct = total_pnl / total_invested * 100 if total_invested >= PNL_MIN_INVESTED else 0.0
    return PortfolioSummary(
        total_value=total_value,
        total_invested=total_invested,
        total_pnl=total_pnl,
        pnl_percentage=pct,
    )


def _is_external_exit(tx: Withdrawal) -> bool:
    if tx.linked_transaction_id:
        return False
    notes = (tx.notes or "").lower()
    return "buy" not in notes and "swap" not in notes


def principal_buckets(
    transactions: Sequence[Transaction],
    *,
    funding_offset: Optional[float] = None,
    stable_symbols: Sequence[str] = STABLE_SYMBOLS,
) -> Dict[str, float]:
    """Cumulative external capital per stable symbol.

    Internal swaps are ignored: a stable deposit counts only when it was not
    paid for with a non-stable asset, and a stable withdrawal counts only when
    it is a genuine exit (unlinked, not a buy or swap).
    """

    stables = {normalize_symbol(s) for s in stable_symbols}
    buckets: Dict[str, float] = {}
    for tx in transactions:
        if tx.symbol not in stables:
            continue
        if isinstance(tx, Deposit):
            if tx.payment is None or tx.payment.currency in stables:
                buckets[tx.symbol] = buckets.get(tx.symbol, 0.0) + tx.amount
        elif isinstance(tx, Withdrawal) and _is_external_exit(tx):
            buckets[tx.symbol] = buckets.get(tx.symbol, 0.0) - tx.amount
    if funding_offset is not None:
        buckets["USD"] = buckets.get("USD", 0.0) + funding_offset
    return buckets


def group_breakdown(
    buckets: Mapping[str, float],
    overrides: Mapping[str, float] | None = None,
) -> Dict[str, float]:
    """Merge USD-pegged buckets and add per-group correction deltas."""

    grouped: Dict[str, float] = {}
    for currency, amount in buckets.items():
        key = USD_STABLE_GROUP if currency in USD_PEGGED_SYMBOLS else currency
        grouped[key] = grouped.get(key, 0.0) + amount
    for currency, delta in (overrides or {}).items():
        if delta != 0:
            grouped[currency] = grouped.get(currency, 0.0) + delta
    return grouped


def bucket_override_delta(
    breakdown: Mapping[str, float],
    overrides: Mapping[str, float],
    currency: str,
    target: float,
) -> float:
    """Delta to store for ``currency`` so its grouped figure reads ``target``."""

    raw = breakdown.get(currency, 0.0) - overrides.get(currency, 0.0)
    return target - raw


def funding_offset_for_target(breakdown: Mapping[str, float], current_offset: Optional[float], target: float) -> float:
    """Offset that makes the total of ``breakdown`` equal ``target``."""

    ledger_total = sum(breakdown.values()) - (current_offset or 0.0)
    return target - ledger_total


__all__ = [
    "PortfolioSummary",
    "summarize_portfolio",
    "principal_buckets",
    "group_breakdown",
    "bucket_override_delta",
    "funding_offset_for_target",
]
