from __future__ import annotations

from crypto_ledger import Payment
from crypto_ledger.journal import (
    CAPITAL_FUNDING,
    EARNED_REWARDS,
    EXPENSE_FEES,
    EXTERNAL_OUTFLOW,
    journal_entries,
)
from crypto_ledger.models import InterestType
from factories import DAY_1, DAY_2, DAY_3, deposit, interest, transfer, withdrawal


def _rows(entries):
    return [(e.tx_id, e.account, e.debit, e.credit, e.currency) for e in entries]


def test_entries_are_newest_first():
    entries = journal_entries(
        [
            deposit("1", "ETH", 1, 1500, on=DAY_1),
            withdrawal("2", "ETH", 0.5, on=DAY_3),
            interest("3", "ETH", 0.01, on=DAY_2),
        ]
    )
    assert [e.tx_id for e in entries] == ["2", "2", "3", "3", "1", "1"]
    assert entries[0].date == "2023-01-03"


def test_external_deposit_is_funded_by_capital():
    assert _rows(journal_entries([deposit("1", "ETH", 2, 1500)])) == [
        ("1", "ETH", 2, 0, "ETH"),
        ("1", CAPITAL_FUNDING, 0, 3000, "USD"),
    ]
    unpriced = journal_entries([deposit("2", "USDC", 100)])
    assert unpriced[1].credit == 100


def test_cross_funded_deposit_credits_payment_asset():
    entries = journal_entries([deposit("1", "SOL", 1, 100, payment=Payment("USDC", 100))])
    assert _rows(entries) == [("1", "SOL", 1, 0, "SOL"), ("1", "USDC", 0, 100, "USDC")]
    assert entries[0].description == "Buy SOL with USDC"


def test_pool_creation_books_fresh_capital_only():
    entries = journal_entries(
        [deposit("1", "LP-ETH-USDC", 1, 3000, notes="Pool Creation: ETH/USDC with $1,500.50 Fresh Capital")]
    )
    assert _rows(entries) == [
        ("1", "LP-ETH-USDC", 1, 0, "LP-ETH-USDC"),
        ("1", CAPITAL_FUNDING, 0, 1500.5, "USD"),
    ]
    assert len(journal_entries([deposit("2", "LP-X", 1, notes="Pool Creation: from spot")])) == 1


def test_interest_credits_earned_rewards():
    entries = journal_entries([interest("1", "CAKE", 4, interest_type=InterestType.FARMING)])
    assert entries[0].description == "FARMING Reward"
    assert entries[1].account == EARNED_REWARDS
    assert entries[1].credit == 4


def test_withdrawals_route_to_pool_or_outflow():
    moved = journal_entries([withdrawal("1", "ETH", 1, notes="Moved to LP LP-ETH-USDC")])
    assert _rows(moved) == [("1", "LP-ETH-USDC", 1, 0, "ETH"), ("1", "ETH", 0, 1, "ETH")]

    sold = journal_entries([withdrawal("2", "ETH", 1)])
    assert _rows(sold) == [("2", EXTERNAL_OUTFLOW, 1, 0, "ETH"), ("2", "ETH", 0, 1, "ETH")]


def test_fees_add_a_balanced_pair():
    entries = journal_entries(
        [
            transfer("1", "ETH", 1, fee=0.002, fee_currency="eth"),
            transfer("2", "ETH", 1),
            withdrawal("3", "BTC", 0.1, fee=5),
        ]
    )
    fees = [e for e in entries if e.tx_type == "FEE"]
    assert _rows(fees) == [
        ("1", EXPENSE_FEES, 0.002, 0, "ETH"),
        ("1", "ETH", 0, 0.002, "ETH"),
        ("3", EXPENSE_FEES, 5, 0, "USD"),
        ("3", "USD", 0, 5, "USD"),
    ]
    assert all(e.tx_id != "2" for e in entries)


def test_zero_payment_is_booked_as_external_inflow():
    entries = journal_entries([deposit("1", "SOL", 1, 100, payment=Payment("USDC", 0))])
    assert _rows(entries) == [("1", "SOL", 1, 0, "SOL"), ("1", CAPITAL_FUNDING, 0, 100, "USD")]
    assert entries[1].description == "External Inflow"
