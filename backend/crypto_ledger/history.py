"""Invested-capital and accrued-earnings time series."""
from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Mapping, Sequence

from .aggregator import sort_transactions
from .models import Deposit, HistoryPoint, Interest, PortfolioHistory, Transaction, Withdrawal

logger = logging.getLogger(__name__)


def _timeline(transactions: Sequence[Transaction], today: date) -> List[date]:
    dates = {tx.date for tx in transactions}
    if not dates:
        return []
    dates.add(today)
    return sorted(dates)


def _earnings_value(accumulated: Mapping[str, float], prices: Mapping[str, float]) -> float:
    return sum(quantity * float(prices.get(symbol) or 0.0) for symbol, quantity in accumulated.items())


def project_history(
    transactions: Sequence[Transaction],
    prices: Mapping[str, float],
    *,
    today: date | None = None,
) -> PortfolioHistory:
    """Project the ledger onto one point per transaction date plus ``today``.

    The invested series nets deposits against withdrawals at each
    transaction's own recorded price. The earnings series values every
    INTEREST quantity accrued so far at the *current* price map, so past
    points are re-priced rather than historical valuations.
    """

    today = today or date.today()
    timeline = _timeline(transactions, today)
    if not timeline:
        return PortfolioHistory()

    ordered = sort_transactions(transactions)
    invested: List[HistoryPoint] = []
    earnings: List[HistoryPoint] = []

    tx_index = 0
    current_invested = 0.0
    earn_index = 0
    accumulated: Dict[str, float] = {}

    for current_date in timeline:
        while tx_index < len(ordered) and ordered[tx_index].date <= current_date:
            tx = ordered[tx_index]
            if isinstance(tx, Deposit):
                current_invested += tx.notional
            elif isinstance(tx, Withdrawal):
                current_invested -= tx.notional
            tx_index += 1
        invested.append(HistoryPoint(date=current_date, value=current_invested))

        while earn_index < len(ordered) and ordered[earn_index].date <= current_date:
            tx = ordered[earn_index]
            if isinstance(tx, Interest):
                accumulated[tx.symbol] = accumulated.get(tx.symbol, 0.0) + tx.amount
            earn_index += 1
        earnings.append(HistoryPoint(date=current_date, value=_earnings_value(accumulated, prices)))

    logger.debug("Projected %d transactions onto %d dates", len(ordered), len(timeline))
    return PortfolioHistory(invested=invested, earnings=earnings)


__all__ = ["project_history"]
