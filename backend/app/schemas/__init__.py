"""Pydantic schema exports."""

from .portfolio import (
    AccountBalanceSchema,
    AssetOverrideSchema,
    AssetSchema,
    EarningsResponse,
    EnhancedEarningsSchema,
    HistoryPointSchema,
    HistoryResponse,
    JournalEntrySchema,
    LedgerRequest,
    LPRangeSchema,
    LPSimulationRequest,
    LPSimulationResponse,
    SummaryRequest,
    SummaryResponse,
    TokenTotalSchema,
    TransactionPayload,
)

__all__ = [
    "AccountBalanceSchema",
    "AssetOverrideSchema",
    "AssetSchema",
    "EarningsResponse",
    "EnhancedEarningsSchema",
    "HistoryPointSchema",
    "HistoryResponse",
    "JournalEntrySchema",
    "LedgerRequest",
    "LPRangeSchema",
    "LPSimulationRequest",
    "LPSimulationResponse",
    "SummaryRequest",
    "SummaryResponse",
    "TokenTotalSchema",
    "TransactionPayload",
]
