"""Attribution of yield rewards to the liquidity positions that produced them."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .constants import LP_SYMBOL_PREFIX
from .models import Asset, Deposit, Interest, Transaction


@dataclass
class EarningsBySource:
    source: str
    source_symbols: Tuple[str, ...]
    tokens: Dict[str, float] = field(default_factory=dict)
    total_value: float = 0.0
    transactions: List[Interest] = field(default_factory=list)


@dataclass(frozen=True)
class EnhancedEarnings:
    source: str
    source_symbols: Tuple[str, ...]
    tokens: Dict[str, float]
    total_value: float
    total_invested: float
    days_active: int
    roi: Optional[float]
    apr: Optional[float]


@dataclass(frozen=True)
class TokenTotal:
    token: str
    quantity: float
    value: float


def _looks_like_pool(symbol: str, lp_assets: set[str]) -> bool:
    return (
        symbol in lp_assets
        or symbol.startswith(LP_SYMBOL_PREFIX)
        or "/" in symbol
        or "-" in symbol
        or "POOL" in symbol
    )


def earnings_by_source(
    assets: Iterable[Asset],
    transactions: Sequence[Transaction],
    prices: Mapping[str, float],
) -> Dict[str, EarningsBySource]:
    """Group INTEREST rewards by the pool(s) they were earned from."""

    lp_assets = {asset.symbol for asset in assets if asset.is_lp}
    grouped: Dict[str, EarningsBySource] = {}
    for tx in transactions:
        if not isinstance(tx, Interest) or not tx.related_symbols:
            continue
        if not any(_looks_like_pool(symbol, lp_assets) for symbol in tx.related_symbols):
            continue
        if len(tx.related_symbols) > 1:
            sources = tuple(sorted(tx.related_symbols))
            key = " + ".join(sources)
        else:
            sources = tx.related_symbols
            key = sources[0]
        item = grouped.get(key)
        if item is None:
            item = grouped[key] = EarningsBySource(source=key, source_symbols=sources)
        item.tokens[tx.symbol] = item.tokens.get(tx.symbol, 0.0) + tx.amount
        item.total_value += tx.amount * float(prices.get(tx.symbol) or 0.0)
        item.transactions.append(tx)
    return grouped


def _funding_cost(tx: Deposit) -> float:
    if tx.payment is not None and tx.payment.amount:
        return tx.payment.amount
    return tx.notional


def _touches(tx: Transaction, symbols: Sequence[str]) -> bool:
    if tx.symbol in symbols:
        return True
    related = getattr(tx, "related_symbols", ())
    return any(symbol in related for symbol in symbols)


def enhance_earnings(
    by_source: Mapping[str, EarningsBySource],
    assets: Iterable[Asset],
    transactions: Sequence[Transaction],
    *,
    today: date | None = None,
) -> List[EnhancedEarnings]:
    """Add invested capital, ROI and annualised yield to each source."""

    today = today or date.today()
    assets_by_symbol = {asset.symbol: asset for asset in assets}
    deposits = [tx for tx in transactions if isinstance(tx, Deposit)]
    enhanced: List[EnhancedEarnings] = []

    for item in by_source.values():
        symbols = item.source_symbols or (item.source,)
        total_invested = 0.0
        for symbol in symbols:
            asset = assets_by_symbol.get(symbol)
            if asset is not None and asset.total_invested > 0:
                total_invested += asset.total_invested
            else:
                total_invested += sum(_funding_cost(tx) for tx in deposits if tx.symbol == symbol)

        roi: Optional[float] = None
        apr: Optional[float] = None
        days_active = 0
        if total_invested > 0:
            roi = item.total_value / total_invested * 100
            opening = [tx for tx in deposits if _touches(tx, symbols)]
            if opening:
                first = min(opening, key=lambda tx: tx.date)
                days_active = abs((today - first.date).days)
                if days_active > 0:
                    apr = roi / days_active * 365

        enhanced.append(
            EnhancedEarnings(
                source=item.source,
                source_symbols=tuple(item.source_symbols),
                tokens=dict(item.tokens),
                total_value=item.total_value,
                total_invested=total_invested,
                days_active=days_active,
                roi=roi,
                apr=apr,
            )
        )
    return enhanced


def totals_by_token(
    by_source: Mapping[str, EarningsBySource],
    prices: Mapping[str, float],
) -> List[TokenTotal]:
    quantities: Dict[str, float] = {}
    for item in by_source.values():
        for token, amount in item.tokens.items():
            quantities[token] = quantities.get(token, 0.0) + amount
    totals = [
        TokenTotal(token=token, quantity=qty, value=qty * float(prices.get(token) or 0.0))
        for token, qty in quantities.items()
    ]
    return sorted(totals, key=lambda t: t.value, reverse=True)


__all__ = [
    "EarningsBySource",
    "EnhancedEarnings",
    "TokenTotal",
    "earnings_by_source",
    "enhance_earnings",
    "totals_by_token",
]
