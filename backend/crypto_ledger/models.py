"""Domain models used by the crypto-ledger accounting engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import ClassVar, Optional, Tuple

from .constants import LP_MOVE_MARKER, LP_SYMBOL_PREFIX


def normalize_symbol(value: str) -> str:
    """Return the canonical (trimmed, upper-cased) form of a ticker."""

    return value.strip().upper()


class TransactionType(str, Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    INTEREST = "INTEREST"
    TRANSFER = "TRANSFER"


class InterestType(str, Enum):
    STAKING = "STAKING"
    SAVINGS = "SAVINGS"
    FARMING = "FARMING"
    LENDING = "LENDING"
    OTHER = "OTHER"


class OverdraftPolicy(str, Enum):
    """How the aggregator treats a disposal larger than the held quantity."""

    ALLOW = "allow"
    CLAMP = "clamp"
    REJECT = "reject"


@dataclass(frozen=True)
class LPRange:
    """Inclusive price band of a liquidity-pool position."""

    min: float
    max: float

    def contains(self, price: float) -> bool:
        return self.min <= price <= self.max


@dataclass(frozen=True)
class Payment:
    """Another held asset spent to fund a deposit."""

    currency: str
    amount: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "currency", normalize_symbol(self.currency))


@dataclass(frozen=True)
class Transaction:
    """A user-entered ledger event; concrete kinds are the subclasses below."""

    type: ClassVar[TransactionType]

    id: str
    date: date
    symbol: str
    amount: float
    notes: Optional[str] = None
    fee: float = 0.0
    fee_currency: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "symbol", normalize_symbol(self.symbol))
        if self.fee_currency:
            object.__setattr__(self, "fee_currency", normalize_symbol(self.fee_currency))

    @property
    def price(self) -> float:
        return float(getattr(self, "price_per_unit", 0.0) or 0.0)

    @property
    def notional(self) -> float:
        """Quote-currency value of the transaction at its own recorded price."""

        return self.amount * self.price


@dataclass(frozen=True)
class Deposit(Transaction):
    type: ClassVar[TransactionType] = TransactionType.DEPOSIT

    price_per_unit: float = 0.0
    payment: Optional[Payment] = None
    lp_range: Optional[LPRange] = None
    monitor_symbol: Optional[str] = None
    linked_transaction_id: Optional[str] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.monitor_symbol:
            object.__setattr__(self, "monitor_symbol", normalize_symbol(self.monitor_symbol))

    def is_funded_by(self, fiat_symbol: str) -> bool:
        """True when the deposit spent ``fiat_symbol`` (or nothing recorded)."""

        return self.payment is None or self.payment.currency == normalize_symbol(fiat_symbol)


@dataclass(frozen=True)
class Withdrawal(Transaction):
    type: ClassVar[TransactionType] = TransactionType.WITHDRAWAL

    price_per_unit: float = 0.0
    linked_transaction_id: Optional[str] = None

    @property
    def moved_to_lp(self) -> bool:
        return bool(self.notes) and LP_MOVE_MARKER in self.notes

    @property
    def lp_destination(self) -> Optional[str]:
        """Pool named after the "Moved to LP" marker, when the notes carry one."""

        if not self.moved_to_lp:
            return None
        tail = self.notes.split(LP_MOVE_MARKER, 1)[1].strip()
        return tail or None


@dataclass(frozen=True)
class Interest(Transaction):
    type: ClassVar[TransactionType] = TransactionType.INTEREST

    price_per_unit: float = 0.0
    interest_type: Optional[InterestType] = None
    platform: Optional[str] = None
    related_symbols: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(
            self, "related_symbols", tuple(normalize_symbol(s) for s in self.related_symbols if s)
        )


@dataclass(frozen=True)
class Transfer(Transaction):
    """Informational movement between venues; never changes holdings."""

    type: ClassVar[TransactionType] = TransactionType.TRANSFER

    source: Optional[str] = None
    platform: Optional[str] = None


@dataclass(frozen=True)
class AssetOverride:
    """User correction applied on every pass over a symbol."""

    avg_buy_price: Optional[float] = None
    reward_tokens: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class Asset:
    """Snapshot of one held asset, rebuilt from the ledger on every call."""

    symbol: str
    quantity: float
    total_invested: float
    average_buy_price: float
    current_price: float
    current_value: float
    unrealized_pnl: float
    pnl_percentage: float
    earned_quantity: Optional[float] = None
    locked_in_lp_quantity: Optional[float] = None
    lp_range: Optional[LPRange] = None
    monitor_symbol: Optional[str] = None
    monitor_price: Optional[float] = None
    in_range: Optional[bool] = None
    reward_tokens: Optional[Tuple[str, ...]] = None

    @property
    def is_lp(self) -> bool:
        return self.lp_range is not None or self.symbol.startswith(LP_SYMBOL_PREFIX)


@dataclass(frozen=True)
class HistoryPoint:
    date: date
    value: float


@dataclass(frozen=True)
class PortfolioHistory:
    """Invested-capital and accrued-earnings series, one point per date."""

    invested: list[HistoryPoint] = field(default_factory=list)
    earnings: list[HistoryPoint] = field(default_factory=list)

    @property
    def dates(self) -> list[date]:
        return [point.date for point in self.invested]


__all__ = [
    "normalize_symbol",
    "TransactionType",
    "InterestType",
    "OverdraftPolicy",
    "LPRange",
    "Payment",
    "Transaction",
    "Deposit",
    "Withdrawal",
    "Interest",
    "Transfer",
    "AssetOverride",
    "Asset",
    "HistoryPoint",
    "PortfolioHistory",
]
