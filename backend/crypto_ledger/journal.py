"""Double-entry style view of the ledger."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Sequence

from .constants import FIAT_SYMBOL, POOL_CREATION_PREFIX
from .models import Deposit, Interest, Transaction, Withdrawal

CAPITAL_FUNDING = "CAPITAL_FUNDING"
EARNED_REWARDS = "EARNED_REWARDS"
EXTERNAL_OUTFLOW = "EXTERNAL_OUTFLOW"
EXPENSE_FEES = "EXPENSE_FEES"

_FRESH_CAPITAL = re.compile(r"\$([\d,.]+) Fresh Capital")


@dataclass(frozen=True)
class JournalEntry:
    tx_id: str
    date: str
    tx_type: str
    description: str
    account: str
    debit: float
    credit: float
    currency: str


def _entry(
    tx: Transaction,
    description: str,
    account: str,
    *,
    currency: str,
    debit: float = 0.0,
    credit: float = 0.0,
    kind: str | None = None,
) -> JournalEntry:
    return JournalEntry(
        tx_id=tx.id,
        date=tx.date.isoformat(),
        tx_type=kind or tx.type.value,
        description=description,
        account=account,
        debit=debit,
        credit=credit,
        currency=currency,
    )


def _fresh_capital(notes: str) -> float:
    match = _FRESH_CAPITAL.search(notes)
    if not match:
        return 0.0
    try:
        return float(match.group(1).replace(",", ""))
    except ValueError:
        return 0.0


def _deposit_entries(tx: Deposit) -> List[JournalEntry]:
    if tx.payment is not None and tx.payment.amount:
        return [
            _entry(tx, f"Buy {tx.symbol} with {tx.payment.currency}", tx.symbol, debit=tx.amount, currency=tx.symbol),
            _entry(
                tx,
                f"Payment for {tx.symbol}",
                tx.payment.currency,
                credit=tx.payment.amount,
                currency=tx.payment.currency,
            ),
        ]
    if tx.notes and tx.notes.startswith(POOL_CREATION_PREFIX):
        # Asset-funded legs are already booked by the "Moved to LP" withdrawals.
        entries = [_entry(tx, "Pool Creation", tx.symbol, debit=tx.amount, currency=tx.symbol)]
        fresh = _fresh_capital(tx.notes)
        if fresh > 0:
            entries.append(_entry(tx, "Fresh Capital Injection", CAPITAL_FUNDING, credit=fresh, currency=FIAT_SYMBOL))
        return entries
    return [
        _entry(tx, f"Deposit {tx.symbol}", tx.symbol, debit=tx.amount, currency=tx.symbol),
        _entry(
            tx,
            "External Inflow",
            CAPITAL_FUNDING,
            credit=tx.amount * (tx.price_per_unit or 1),
            currency=FIAT_SYMBOL,
        ),
    ]


def _interest_entries(tx: Interest) -> List[JournalEntry]:
    label = tx.interest_type.value if tx.interest_type else "Yield"
    return [
        _entry(tx, f"{label} Reward", tx.symbol, debit=tx.amount, currency=tx.symbol),
        _entry(tx, "Staking/Yield Earnings", EARNED_REWARDS, credit=tx.amount, currency=tx.symbol),
    ]


def _withdrawal_entries(tx: Withdrawal) -> List[JournalEntry]:
    pool = tx.lp_destination
    if pool:
        return [
            _entry(tx, f"Contribute to {pool}", pool, debit=tx.amount, currency=tx.symbol),
            _entry(tx, "Transferred to LP", tx.symbol, credit=tx.amount, currency=tx.symbol),
        ]
    return [
        _entry(tx, f"Withdraw {tx.symbol}", EXTERNAL_OUTFLOW, debit=tx.amount, currency=tx.symbol),
        _entry(tx, f"Reduction of spot {tx.symbol}", tx.symbol, credit=tx.amount, currency=tx.symbol),
    ]


def _fee_entries(tx: Transaction) -> List[JournalEntry]:
    if tx.fee <= 0:
        return []
    fee_currency = tx.fee_currency or FIAT_SYMBOL
    return [
        _entry(tx, "Network/Platform Fee", EXPENSE_FEES, debit=tx.fee, currency=fee_currency, kind="FEE"),
        _entry(tx, "Fee Payment", fee_currency, credit=tx.fee, currency=fee_currency, kind="FEE"),
    ]


def journal_entries(transactions: Sequence[Transaction]) -> List[JournalEntry]:
    """Return balanced debit/credit rows, most recent transaction first."""

    entries: List[JournalEntry] = []
    for tx in sorted(transactions, key=lambda t: t.date, reverse=True):
        if isinstance(tx, Deposit):
            entries.extend(_deposit_entries(tx))
        elif isinstance(tx, Interest):
            entries.extend(_interest_entries(tx))
        elif isinstance(tx, Withdrawal):
            entries.extend(_withdrawal_entries(tx))
        entries.extend(_fee_entries(tx))
    return entries


__all__ = [
    "JournalEntry",
    "journal_entries",
    "CAPITAL_FUNDING",
    "EARNED_REWARDS",
    "EXTERNAL_OUTFLOW",
    "EXPENSE_FEES",
]
