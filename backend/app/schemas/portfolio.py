"""Pydantic schemas for the portfolio accounting endpoints."""

from __future__ import annotations

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

from crypto_ledger.earnings import EnhancedEarnings, TokenTotal
from crypto_ledger.journal import JournalEntry
from crypto_ledger.models import Asset, AssetOverride, PortfolioHistory, Transaction
from crypto_ledger.records import normalize_prices, parse_overrides, parse_transaction


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class LPRangeSchema(CamelModel):
    min: float = Field(..., ge=0)
    max: float = Field(..., ge=0)

    @model_validator(mode="after")
    def _ordered(self) -> "LPRangeSchema":
        if self.min > self.max:
            raise ValueError("lpRange.min must not exceed lpRange.max")
        return self


class TransactionPayload(CamelModel):
    id: str = Field(..., min_length=1)
    type: Literal["DEPOSIT", "WITHDRAWAL", "INTEREST", "TRANSFER", "BUY", "SELL"]
    asset_symbol: str = Field(..., min_length=1, examples=["ETH"])
    amount: float = Field(..., ge=0)
    date: dt.date
    price_per_unit: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None
    payment_currency: Optional[str] = None
    payment_amount: Optional[float] = Field(default=None, ge=0)
    lp_range: Optional[LPRangeSchema] = None
    monitor_symbol: Optional[str] = None
    fee: Optional[float] = Field(default=None, ge=0)
    fee_currency: Optional[str] = None
    interest_type: Optional[str] = None
    platform: Optional[str] = None
    source: Optional[str] = None
    related_asset_symbol: Optional[str] = None
    related_asset_symbols: Optional[list[str]] = None
    linked_transaction_id: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "id": "tx-2",
                "type": "DEPOSIT",
                "assetSymbol": "SOL",
                "amount": 1,
                "pricePerUnit": 100,
                "date": "2023-01-02",
                "paymentCurrency": "USDC",
                "paymentAmount": 100,
            }
        }

    def to_domain(self) -> Transaction:
        return parse_transaction(self.model_dump(by_alias=True))


class AssetOverrideSchema(CamelModel):
    avg_buy_price: Optional[float] = Field(default=None, ge=0)
    reward_tokens: Optional[list[str]] = None


class LedgerRequest(CamelModel):
    transactions: list[TransactionPayload] = Field(default_factory=list)
    prices: dict[str, Optional[float]] = Field(default_factory=dict)
    overrides: dict[str, AssetOverrideSchema] = Field(default_factory=dict)

    def ledger(self) -> list[Transaction]:
        return [payload.to_domain() for payload in self.transactions]

    def price_map(self) -> dict[str, float]:
        return normalize_prices(self.prices)

    def override_map(self) -> dict[str, AssetOverride]:
        return parse_overrides(
            {symbol: value.model_dump(by_alias=True) for symbol, value in self.overrides.items()}
        )


class SummaryRequest(LedgerRequest):
    funding_offset: Optional[float] = None
    bucket_overrides: dict[str, float] = Field(default_factory=dict)


class AssetSchema(CamelModel):
    symbol: str
    quantity: float
    total_invested: float
    average_buy_price: float
    current_price: float
    current_value: float
    unrealized_pnl: float = Field(..., alias="unrealizedPnL")
    pnl_percentage: float
    earned_quantity: Optional[float] = None
    locked_in_lp_quantity: Optional[float] = None
    lp_range: Optional[LPRangeSchema] = None
    monitor_symbol: Optional[str] = None
    monitor_price: Optional[float] = None
    in_range: Optional[bool] = None
    reward_tokens: Optional[list[str]] = None

    @classmethod
    def from_domain(cls, asset: Asset) -> "AssetSchema":
        return cls(
            symbol=asset.symbol,
            quantity=asset.quantity,
            total_invested=asset.total_invested,
            average_buy_price=asset.average_buy_price,
            current_price=asset.current_price,
            current_value=asset.current_value,
            unrealized_pnl=asset.unrealized_pnl,
            pnl_percentage=asset.pnl_percentage,
            earned_quantity=asset.earned_quantity,
            locked_in_lp_quantity=asset.locked_in_lp_quantity,
            lp_range=(
                LPRangeSchema(min=asset.lp_range.min, max=asset.lp_range.max) if asset.lp_range else None
            ),
            monitor_symbol=asset.monitor_symbol,
            monitor_price=asset.monitor_price,
            in_range=asset.in_range,
            reward_tokens=list(asset.reward_tokens) if asset.reward_tokens is not None else None,
        )


class HistoryPointSchema(CamelModel):
    date: dt.date
    value: float


class HistoryResponse(CamelModel):
    invested: list[HistoryPointSchema]
    earnings: list[HistoryPointSchema]

    @classmethod
    def from_domain(cls, history: PortfolioHistory) -> "HistoryResponse":
        return cls(
            invested=[HistoryPointSchema(date=p.date, value=p.value) for p in history.invested],
            earnings=[HistoryPointSchema(date=p.date, value=p.value) for p in history.earnings],
        )


class SummaryResponse(CamelModel):
    total_value: float
    total_invested: float
    total_pnl: float = Field(..., alias="totalPnL")
    pnl_percentage: float
    principal_buckets: dict[str, float]
    funding_breakdown: dict[str, float]
    total_principal: float


class EnhancedEarningsSchema(CamelModel):
    source: str
    source_symbols: list[str]
    tokens: dict[str, float]
    total_value: float
    total_invested: float
    days_active: int
    roi: Optional[float] = None
    apr: Optional[float] = None

    @classmethod
    def from_domain(cls, item: EnhancedEarnings) -> "EnhancedEarningsSchema":
        return cls(
            source=item.source,
            source_symbols=list(item.source_symbols),
            tokens=dict(item.tokens),
            total_value=item.total_value,
            total_invested=item.total_invested,
            days_active=item.days_active,
            roi=item.roi,
            apr=item.apr,
        )


class TokenTotalSchema(CamelModel):
    token: str
    quantity: float
    value: float

    @classmethod
    def from_domain(cls, item: TokenTotal) -> "TokenTotalSchema":
        return cls(token=item.token, quantity=item.quantity, value=item.value)


class EarningsResponse(CamelModel):
    sources: list[EnhancedEarningsSchema]
    totals: list[TokenTotalSchema]
    total_value: float


class JournalEntrySchema(CamelModel):
    tx_id: str
    date: str
    tx_type: str
    description: str
    account: str
    debit: float
    credit: float
    currency: str

    @classmethod
    def from_domain(cls, entry: JournalEntry) -> "JournalEntrySchema":
        return cls(
            tx_id=entry.tx_id,
            date=entry.date,
            tx_type=entry.tx_type,
            description=entry.description,
            account=entry.account,
            debit=entry.debit,
            credit=entry.credit,
            currency=entry.currency,
        )


class AccountBalanceSchema(CamelModel):
    account: str
    currency: str
    debit: float
    credit: float
    balance: float


class LPSimulationRequest(CamelModel):
    current_price: float = Field(..., gt=0)
    lower_price: float = Field(..., gt=0)
    upper_price: float = Field(..., gt=0)
    deposit_value: float = Field(..., gt=0, description="Deposit size in quote-token units")
    target_price: Optional[float] = Field(default=None, gt=0)


class LPSimulationResponse(CamelModel):
    amount0: float
    amount1: float
    liquidity: float
    split0: float
    split1: float
    delta: float
    lp_value: Optional[float] = None
    held_value: Optional[float] = None
    il_percentage: Optional[float] = None
    il_quote: Optional[float] = None


__all__ = [
    "TransactionPayload",
    "AssetOverrideSchema",
    "LedgerRequest",
    "SummaryRequest",
    "AssetSchema",
    "HistoryPointSchema",
    "HistoryResponse",
    "SummaryResponse",
    "EnhancedEarningsSchema",
    "TokenTotalSchema",
    "EarningsResponse",
    "JournalEntrySchema",
    "LPRangeSchema",
    "LPSimulationRequest",
    "LPSimulationResponse",
]
