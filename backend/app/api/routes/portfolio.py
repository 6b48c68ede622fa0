"""Portfolio accounting endpoints."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from typing import Iterator

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.api.dependencies.settings import settings_dependency, today_dependency
from app.config import AppSettings
from app.core.telemetry import get_tracer, record_fold_size
from app.schemas import (
    AccountBalanceSchema,
    AssetSchema,
    EarningsResponse,
    EnhancedEarningsSchema,
    HistoryResponse,
    JournalEntrySchema,
    LedgerRequest,
    SummaryRequest,
    SummaryResponse,
    TokenTotalSchema,
)
from crypto_ledger import LedgerError, aggregate_assets, project_history
from crypto_ledger.earnings import earnings_by_source, enhance_earnings, totals_by_token
from crypto_ledger.frames import account_balances, assets_frame, history_frame, journal_frame
from crypto_ledger.journal import journal_entries
from crypto_ledger.models import Asset
from crypto_ledger.summary import group_breakdown, principal_buckets, summarize_portfolio

logger = logging.getLogger(__name__)
router = APIRouter()


@contextmanager
def _unprocessable() -> Iterator[None]:
    try:
        yield
    except LedgerError as exc:
        logger.info("Rejected ledger request: %s", exc)
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc


def _aggregate(request: LedgerRequest, settings: AppSettings) -> list[Asset]:
    with get_tracer().start_as_current_span("ledger.aggregate") as span:
        transactions = request.ledger()
        span.set_attribute("ledger.transactions", len(transactions))
        span.set_attribute("ledger.overdraft_policy", settings.overdraft_policy.value)
        record_fold_size(len(transactions), policy=settings.overdraft_policy.value)
        assets = aggregate_assets(
            transactions,
            request.price_map(),
            request.override_map(),
            overdraft_policy=settings.overdraft_policy,
            fiat_symbol=settings.base_currency,
        )
        span.set_attribute("ledger.assets", len(assets))
        return assets


def _csv_attachment(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/assets", response_model=list[AssetSchema])
async def list_assets(
    request: LedgerRequest,
    settings: AppSettings = Depends(settings_dependency),
) -> list[AssetSchema]:
    """Fold the ledger into per-asset holdings valued at the supplied prices."""

    with _unprocessable():
        assets = _aggregate(request, settings)
    return [AssetSchema.from_domain(asset) for asset in assets]


@router.post("/history", response_model=HistoryResponse)
async def history(
    request: LedgerRequest,
    today: date = Depends(today_dependency),
) -> HistoryResponse:
    """Invested capital and accrued earnings per transaction date."""

    with _unprocessable(), get_tracer().start_as_current_span("ledger.history"):
        series = project_history(request.ledger(), request.price_map(), today=today)
    return HistoryResponse.from_domain(series)


@router.post("/summary", response_model=SummaryResponse)
async def summary(
    request: SummaryRequest,
    settings: AppSettings = Depends(settings_dependency),
) -> SummaryResponse:
    """Portfolio totals with the external funding breakdown."""

    with _unprocessable():
        assets = _aggregate(request, settings)
        totals = summarize_portfolio(assets)
        buckets = principal_buckets(request.ledger(), funding_offset=request.funding_offset)
    breakdown = group_breakdown(buckets, request.bucket_overrides)
    return SummaryResponse(
        total_value=totals.total_value,
        total_invested=totals.total_invested,
        total_pnl=totals.total_pnl,
        pnl_percentage=totals.pnl_percentage,
        principal_buckets=buckets,
        funding_breakdown=breakdown,
        total_principal=sum(breakdown.values()),
    )


@router.post("/earnings", response_model=EarningsResponse)
async def earnings(
    request: LedgerRequest,
    settings: AppSettings = Depends(settings_dependency),
    today: date = Depends(today_dependency),
) -> EarningsResponse:
    """Yield rewards attributed to the liquidity positions that produced them."""

    with _unprocessable():
        assets = _aggregate(request, settings)
        transactions = request.ledger()
    prices = request.price_map()
    by_source = earnings_by_source(assets, transactions, prices)
    enhanced = enhance_earnings(by_source, assets, transactions, today=today)
    return EarningsResponse(
        sources=[EnhancedEarningsSchema.from_domain(item) for item in enhanced],
        totals=[TokenTotalSchema.from_domain(item) for item in totals_by_token(by_source, prices)],
        total_value=sum(item.total_value for item in by_source.values()),
    )


@router.post("/journal", response_model=list[JournalEntrySchema])
async def journal(request: LedgerRequest) -> list[JournalEntrySchema]:
    """Double-entry rows for the ledger, newest first."""

    with _unprocessable():
        entries = journal_entries(request.ledger())
    return [JournalEntrySchema.from_domain(entry) for entry in entries]


@router.post("/journal.csv", response_class=Response)
async def journal_csv(request: LedgerRequest) -> Response:
    """The journal as a CSV attachment."""

    with _unprocessable():
        entries = journal_entries(request.ledger())
    return _csv_attachment(journal_frame(entries).to_csv(index=False), "journal.csv")


@router.post("/journal/balances", response_model=list[AccountBalanceSchema])
async def journal_balances(request: LedgerRequest) -> list[AccountBalanceSchema]:
    """Net debit minus credit per journal account and currency."""

    with _unprocessable():
        entries = journal_entries(request.ledger())
    return [AccountBalanceSchema(**row) for row in account_balances(entries).to_dict(orient="records")]


@router.post("/assets.csv", response_class=Response)
async def assets_csv(
    request: LedgerRequest,
    settings: AppSettings = Depends(settings_dependency),
) -> Response:
    """Holdings as a CSV attachment, LP range flattened into two columns."""

    with _unprocessable():
        assets = _aggregate(request, settings)
    return _csv_attachment(assets_frame(assets).to_csv(index=False), "assets.csv")


@router.post("/history.csv", response_class=Response)
async def history_csv(
    request: LedgerRequest,
    today: date = Depends(today_dependency),
) -> Response:
    with _unprocessable(), get_tracer().start_as_current_span("ledger.history"):
        series = project_history(request.ledger(), request.price_map(), today=today)
    frame = history_frame(series)
    return _csv_attachment(frame.to_csv(date_format="%Y-%m-%d"), "history.csv")


__all__ = [
    "router",
    "list_assets",
    "history",
    "summary",
    "earnings",
    "journal",
    "journal_csv",
    "journal_balances",
    "assets_csv",
    "history_csv",
]
