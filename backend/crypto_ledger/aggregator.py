"""Weighted-average cost aggregation of the transaction ledger into holdings."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .constants import DUST_THRESHOLD, EPSILON, FIAT_SYMBOL, LP_SYMBOL_PREFIX, PNL_MIN_INVESTED
from .errors import OverdraftError
from .models import (
    Asset,
    AssetOverride,
    Deposit,
    Interest,
    LPRange,
    OverdraftPolicy,
    Transaction,
    Transfer,
    Withdrawal,
    normalize_symbol,
)

logger = logging.getLogger(__name__)


@dataclass
class _Holding:
    """Mutable accumulator for one symbol while the ledger is folded."""

    symbol: str
    quantity: float = 0.0
    total_invested: float = 0.0
    average_buy_price: float = 0.0
    earned_quantity: Optional[float] = None
    locked_in_lp_quantity: Optional[float] = None
    lp_range: Optional[LPRange] = None
    monitor_symbol: Optional[str] = None
    reward_tokens: Optional[Tuple[str, ...]] = None

    @property
    def average_cost(self) -> float:
        return self.total_invested / self.quantity if self.quantity > 0 else 0.0

    @property
    def is_lp(self) -> bool:
        return self.lp_range is not None or self.symbol.startswith(LP_SYMBOL_PREFIX)


def sort_transactions(transactions: Iterable[Transaction]) -> List[Transaction]:
    """Return a date-ascending copy; same-date entries keep their input order."""

    return sorted(transactions, key=lambda tx: tx.date)


def _holding(holdings: Dict[str, _Holding], symbol: str) -> _Holding:
    if symbol not in holdings:
        holdings[symbol] = _Holding(symbol=symbol)
    return holdings[symbol]


def _disposable(
    holding: _Holding,
    requested: float,
    policy: OverdraftPolicy,
    tx: Transaction,
) -> float:
    """Quantity a disposal may actually remove under ``policy``."""

    available = max(holding.quantity, 0.0)
    if requested <= available + EPSILON:
        return requested
    if policy is OverdraftPolicy.REJECT:
        raise OverdraftError(holding.symbol, requested, available)
    logger.warning(
        "Transaction %s disposes of %g %s but only %g is held (policy=%s)",
        tx.id,
        requested,
        holding.symbol,
        available,
        policy.value,
    )
    if policy is OverdraftPolicy.CLAMP:
        return available
    return requested


def _snap_dust(holding: _Holding) -> None:
    if abs(holding.quantity) <= EPSILON:
        holding.quantity = 0.0
        holding.total_invested = 0.0
    if abs(holding.total_invested) < EPSILON:
        holding.total_invested = 0.0


def _settle(holding: _Holding, override: Optional[AssetOverride]) -> None:
    """Clamp residue, refresh the average cost and re-apply any override."""

    _snap_dust(holding)
    holding.average_buy_price = holding.average_cost
    if override is None:
        return
    if override.avg_buy_price is not None:
        holding.average_buy_price = override.avg_buy_price
        holding.total_invested = holding.quantity * override.avg_buy_price
    if override.reward_tokens is not None:
        holding.reward_tokens = tuple(override.reward_tokens)


def _apply_deposit(
    holdings: Dict[str, _Holding],
    tx: Deposit,
    *,
    policy: OverdraftPolicy,
    fiat_symbol: str,
) -> Optional[_Holding]:
    holding = _holding(holdings, tx.symbol)
    holding.quantity += tx.amount
    holding.total_invested += tx.amount * tx.price_per_unit
    if tx.lp_range is not None:
        holding.lp_range = tx.lp_range
    if tx.monitor_symbol:
        holding.monitor_symbol = tx.monitor_symbol

    payment = tx.payment
    if tx.is_funded_by(fiat_symbol) or not payment.amount:
        return None
    # Funding asset is sold at its running average cost; no realized gain is kept.
    funding = _holding(holdings, payment.currency)
    spent = _disposable(funding, payment.amount, policy, tx)
    avg_price = funding.average_cost
    funding.total_invested -= spent * avg_price
    funding.quantity -= spent
    return funding


def _apply_withdrawal(holding: _Holding, tx: Withdrawal, *, policy: OverdraftPolicy) -> None:
    amount = _disposable(holding, tx.amount, policy, tx)
    avg_price = holding.average_cost
    holding.total_invested -= amount * avg_price
    holding.quantity -= amount
    if holding.quantity <= EPSILON:
        holding.quantity = 0.0
        holding.total_invested = 0.0
    if holding.total_invested < EPSILON:
        holding.total_invested = 0.0
    if tx.moved_to_lp:
        holding.locked_in_lp_quantity = (holding.locked_in_lp_quantity or 0.0) + amount


def _price(prices: Mapping[str, float], symbol: str) -> float:
    return float(prices.get(symbol) or 0.0)


def resolve_monitor_price(prices: Mapping[str, float], monitor_symbol: str) -> float:
    """Price of ``monitor_symbol``; ``A/B`` pairs resolve to ``price[A] / price[B]``."""

    if "/" in monitor_symbol:
        base, quote = (normalize_symbol(part) for part in monitor_symbol.split("/", 1))
        quote_price = _price(prices, quote)
        if quote_price <= 0:
            return 0.0
        return _price(prices, base) / quote_price
    return _price(prices, normalize_symbol(monitor_symbol))


def _snapshot(holding: _Holding, prices: Mapping[str, float]) -> Asset:
    current_price = _price(prices, holding.symbol)

    monitor_price: Optional[float] = None
    in_range: Optional[bool] = None
    if holding.lp_range is not None and holding.monitor_symbol:
        monitor_price = resolve_monitor_price(prices, holding.monitor_symbol)
        if monitor_price > 0:
            in_range = holding.lp_range.contains(monitor_price)

    if current_price == 0 and holding.is_lp:
        # Unpriced pool tokens are carried at cost.
        current_value = holding.total_invested
    else:
        current_value = holding.quantity * current_price
    unrealized = current_value - holding.total_invested
    if holding.total_invested >= PNL_MIN_INVESTED:
        pnl_pct = unrealized / holding.total_invested * 100
    else:
        pnl_pct = 0.0

    return Asset(
        symbol=holding.symbol,
        quantity=holding.quantity,
        total_invested=holding.total_invested,
        average_buy_price=holding.average_buy_price,
        current_price=current_price,
        current_value=current_value,
        unrealized_pnl=unrealized,
        pnl_percentage=pnl_pct,
        earned_quantity=holding.earned_quantity,
        locked_in_lp_quantity=holding.locked_in_lp_quantity,
        lp_range=holding.lp_range,
        monitor_symbol=holding.monitor_symbol,
        monitor_price=monitor_price,
        in_range=in_range,
        reward_tokens=holding.reward_tokens,
    )


def aggregate_assets(
    transactions: Sequence[Transaction],
    prices: Mapping[str, float],
    overrides: Mapping[str, AssetOverride] | None = None,
    *,
    overdraft_policy: OverdraftPolicy = OverdraftPolicy.ALLOW,
    fiat_symbol: str = FIAT_SYMBOL,
) -> List[Asset]:
    """Fold the ledger into the current holdings, priced with ``prices``.

    ``prices`` and ``overrides`` are keyed by normalized symbol. Holdings are
    returned in order of first appearance, with dust (quantity <= 1e-6)
    removed.
    """

    overrides = overrides or {}
    policy = OverdraftPolicy(overdraft_policy)
    fiat = normalize_symbol(fiat_symbol)
    holdings: Dict[str, _Holding] = {}

    ordered = sort_transactions(transactions)
    for tx in ordered:
        if isinstance(tx, Transfer):
            continue
        holding = _holding(holdings, tx.symbol)
        touched = [holding]
        if isinstance(tx, Deposit):
            funding = _apply_deposit(holdings, tx, policy=policy, fiat_symbol=fiat)
            if funding is not None:
                touched.append(funding)
        elif isinstance(tx, Interest):
            holding.quantity += tx.amount
            holding.earned_quantity = (holding.earned_quantity or 0.0) + tx.amount
        elif isinstance(tx, Withdrawal):
            _apply_withdrawal(holding, tx, policy=policy)
        for item in touched:
            _settle(item, overrides.get(item.symbol))

    assets = [_snapshot(holding, prices) for holding in holdings.values()]
    held = [asset for asset in assets if asset.quantity > DUST_THRESHOLD]
    logger.debug(
        "Aggregated %d transactions into %d holdings (%d after dust filter)",
        len(ordered),
        len(assets),
        len(held),
    )
    return held


__all__ = ["aggregate_assets", "resolve_monitor_price", "sort_transactions"]
