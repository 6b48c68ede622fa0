from __future__ import annotations

import pandas as pd

from crypto_ledger import LPRange, aggregate_assets, project_history
from crypto_ledger.frames import account_balances, assets_frame, history_frame, journal_frame
from crypto_ledger.journal import CAPITAL_FUNDING, journal_entries
from crypto_ledger.models import PortfolioHistory
from factories import DAY_1, DAY_2, DAY_3, deposit, interest


def test_assets_frame_flattens_lp_range():
    assets = aggregate_assets(
        [deposit("1", "ETH", 1, 100), deposit("2", "LP-ETH-USDC", 1, 500, lp_range=LPRange(1, 2))],
        {"ETH": 120},
    )
    df = assets_frame(assets)
    assert list(df["symbol"]) == ["ETH", "LP-ETH-USDC"]
    assert df.loc[0, "current_value"] == 120
    assert pd.isna(df.loc[0, "lp_min"])
    assert df.loc[1, "lp_max"] == 2


def test_history_frame_is_indexed_by_date():
    history = project_history(
        [deposit("1", "ETH", 1, 100, on=DAY_1), interest("2", "ETH", 1, on=DAY_2)],
        {"ETH": 150},
        today=DAY_3,
    )
    df = history_frame(history)
    assert df.index.name == "date"
    assert isinstance(df.index, pd.DatetimeIndex)
    assert list(df["invested"]) == [100, 100, 100]
    assert list(df["earnings"]) == [0, 150, 150]
    assert df.index[-1] == pd.Timestamp(DAY_3)


def test_empty_history_frame():
    df = history_frame(PortfolioHistory())
    assert df.empty
    assert list(df.columns) == ["invested", "earnings"]


def test_journal_frame_and_balances():
    entries = journal_entries([deposit("1", "ETH", 2, 1500), deposit("2", "ETH", 1, 1000, on=DAY_2)])
    df = journal_frame(entries)
    assert len(df) == 4
    assert list(df.columns) == ["tx_id", "date", "tx_type", "description", "account", "debit", "credit", "currency"]

    balances = account_balances(entries).set_index("account")
    assert balances.loc["ETH", "balance"] == 3
    assert balances.loc[CAPITAL_FUNDING, "balance"] == -4000


def test_balances_of_empty_journal():
    assert account_balances([]).empty
