"""Tabular (pandas) views of engine output for export and analysis."""

from __future__ import annotations

from dataclasses import asdict
from typing import Iterable, Sequence

import pandas as pd

from .journal import JournalEntry
from .models import Asset, PortfolioHistory

ASSET_COLUMNS = [
    "symbol",
    "quantity",
    "total_invested",
    "average_buy_price",
    "current_price",
    "current_value",
    "unrealized_pnl",
    "pnl_percentage",
    "earned_quantity",
    "locked_in_lp_quantity",
    "monitor_symbol",
    "monitor_price",
    "in_range",
]
JOURNAL_COLUMNS = ["tx_id", "date", "tx_type", "description", "account", "debit", "credit", "currency"]


def assets_frame(assets: Iterable[Asset]) -> pd.DataFrame:
    """One row per asset, with the LP range flattened into ``lp_min``/``lp_max``."""

    rows = []
    for asset in assets:
        row = {column: getattr(asset, column) for column in ASSET_COLUMNS}
        row["lp_min"] = asset.lp_range.min if asset.lp_range else None
        row["lp_max"] = asset.lp_range.max if asset.lp_range else None
        rows.append(row)
    return pd.DataFrame(rows, columns=ASSET_COLUMNS + ["lp_min", "lp_max"])


def history_frame(history: PortfolioHistory) -> pd.DataFrame:
    """Both series side by side on a ``DatetimeIndex`` named ``date``."""

    if not history.invested:
        return pd.DataFrame(columns=["invested", "earnings"], index=pd.DatetimeIndex([], name="date"))
    df = pd.DataFrame(
        {
            "date": pd.to_datetime([point.date for point in history.invested]),
            "invested": [point.value for point in history.invested],
            "earnings": [point.value for point in history.earnings],
        }
    )
    return df.set_index("date")


def journal_frame(entries: Sequence[JournalEntry]) -> pd.DataFrame:
    return pd.DataFrame([asdict(entry) for entry in entries], columns=JOURNAL_COLUMNS)


def account_balances(entries: Sequence[JournalEntry]) -> pd.DataFrame:
    """Net debit minus credit per account and currency."""

    df = journal_frame(entries)
    if df.empty:
        return pd.DataFrame(columns=["account", "currency", "debit", "credit", "balance"])
    grouped = df.groupby(["account", "currency"], as_index=False)[["debit", "credit"]].sum()
    grouped["balance"] = grouped["debit"] - grouped["credit"]
    return grouped


__all__ = ["assets_frame", "history_frame", "journal_frame", "account_balances"]
