"""Portfolio accounting engine for a personal crypto-asset tracker."""

from .aggregator import aggregate_assets, sort_transactions
from .errors import LedgerError, OverdraftError, TransactionValidationError
from .history import project_history
from .models import (
    Asset,
    AssetOverride,
    Deposit,
    HistoryPoint,
    Interest,
    LPRange,
    OverdraftPolicy,
    Payment,
    PortfolioHistory,
    Transaction,
    TransactionType,
    Transfer,
    Withdrawal,
)
from .records import normalize_prices, parse_overrides, parse_transaction, parse_transactions

__all__ = [
    "Asset",
    "AssetOverride",
    "Deposit",
    "HistoryPoint",
    "Interest",
    "LPRange",
    "OverdraftPolicy",
    "Payment",
    "PortfolioHistory",
    "Transaction",
    "TransactionType",
    "Transfer",
    "Withdrawal",
    "LedgerError",
    "OverdraftError",
    "TransactionValidationError",
    "aggregate_assets",
    "project_history",
    "sort_transactions",
    "normalize_prices",
    "parse_overrides",
    "parse_transaction",
    "parse_transactions",
]
