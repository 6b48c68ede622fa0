"""Exceptions raised by the accounting engine."""

from __future__ import annotations


class LedgerError(ValueError):
    """Base class for engine errors."""


class TransactionValidationError(LedgerError):
    """A raw transaction record could not be turned into a typed transaction."""

    def __init__(self, message: str, *, transaction_id: str | None = None, field: str | None = None):
        self.transaction_id = transaction_id
        self.field = field
        prefix = f"Transaction {transaction_id}: " if transaction_id else ""
        super().__init__(f"{prefix}{message}")


class OverdraftError(LedgerError):
    """A disposal tried to consume more than the held quantity."""

    def __init__(self, symbol: str, requested: float, available: float):
        self.symbol = symbol
        self.requested = requested
        self.available = available
        super().__init__(
            f"Cannot dispose of {requested:g} {symbol}; only {available:g} held"
        )


__all__ = ["LedgerError", "TransactionValidationError", "OverdraftError"]
