"""Conversion of raw exported records into typed transactions.

The surrounding application stores transactions as loosely typed camelCase
objects. Everything that enters the engine from outside goes through
:func:`parse_transaction`, which rejects malformed rows with a
:class:`~crypto_ledger.errors.TransactionValidationError` instead of letting
``NaN`` leak into the accounting.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, Iterable, Mapping

from .errors import TransactionValidationError
from .models import (
    AssetOverride,
    Deposit,
    Interest,
    InterestType,
    LPRange,
    Payment,
    Transaction,
    TransactionType,
    Transfer,
    Withdrawal,
    normalize_symbol,
)

_LEGACY_TYPES = {"BUY": TransactionType.DEPOSIT, "SELL": TransactionType.WITHDRAWAL}
_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}(?:[T ].+)?")


def _number(
    value: Any,
    *,
    field: str,
    tx_id: str | None,
    default: float | None = None,
) -> float:
    if value is None or value == "":
        if default is None:
            raise TransactionValidationError(f"{field} is required", transaction_id=tx_id, field=field)
        return default
    if isinstance(value, bool):
        raise TransactionValidationError(f"{field} must be numeric", transaction_id=tx_id, field=field)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise TransactionValidationError(
            f"{field} must be numeric, got {value!r}", transaction_id=tx_id, field=field
        ) from None
    if not math.isfinite(number):
        raise TransactionValidationError(f"{field} must be finite", transaction_id=tx_id, field=field)
    if number < 0:
        raise TransactionValidationError(f"{field} must be >= 0", transaction_id=tx_id, field=field)
    return number


def parse_date(value: Any, *, tx_id: str | None = None) -> date:
    """Parse an ISO ``YYYY-MM-DD`` date or a full ISO datetime (its calendar day is kept)."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise TransactionValidationError("date is required", transaction_id=tx_id, field="date")
    text = value.strip()
    try:
        if not _ISO_DATE.fullmatch(text):
            raise ValueError(text)
        if len(text) == 10:
            return date.fromisoformat(text)
        if text.endswith("Z"):
            text = f"{text[:-1]}+00:00"
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise TransactionValidationError(
            f"date must be ISO YYYY-MM-DD, got {value!r}", transaction_id=tx_id, field="date"
        ) from None


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _payment(record: Mapping[str, Any], tx_id: str | None) -> Payment | None:
    currency = _text(record.get("paymentCurrency"))
    raw_amount = record.get("paymentAmount")
    if currency is None and raw_amount in (None, ""):
        return None
    if currency is None:
        raise TransactionValidationError(
            "paymentAmount requires paymentCurrency", transaction_id=tx_id, field="paymentCurrency"
        )
    if raw_amount in (None, ""):
        raise TransactionValidationError(
            "paymentCurrency requires paymentAmount", transaction_id=tx_id, field="paymentAmount"
        )
    amount = _number(raw_amount, field="paymentAmount", tx_id=tx_id)
    return Payment(currency=currency, amount=amount)


def _lp_range(value: Any, tx_id: str | None) -> LPRange | None:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise TransactionValidationError("lpRange must be an object", transaction_id=tx_id, field="lpRange")
    lower = _number(value.get("min"), field="lpRange.min", tx_id=tx_id)
    upper = _number(value.get("max"), field="lpRange.max", tx_id=tx_id)
    if lower > upper:
        raise TransactionValidationError(
            "lpRange.min must not exceed lpRange.max", transaction_id=tx_id, field="lpRange"
        )
    return LPRange(min=lower, max=upper)


def _related_symbols(record: Mapping[str, Any]) -> tuple[str, ...]:
    many = record.get("relatedAssetSymbols") or []
    if many:
        return tuple(str(s) for s in many if s)
    single = _text(record.get("relatedAssetSymbol"))
    return (single,) if single else ()


def _interest_type(value: Any, tx_id: str | None) -> InterestType | None:
    text = _text(value)
    if text is None:
        return None
    try:
        return InterestType(text.upper())
    except ValueError:
        raise TransactionValidationError(
            f"unknown interestType {value!r}", transaction_id=tx_id, field="interestType"
        ) from None


def parse_transaction(record: Mapping[str, Any]) -> Transaction:
    """Build the typed transaction variant described by ``record``."""

    tx_id = _text(record.get("id"))
    if tx_id is None:
        raise TransactionValidationError("id is required", field="id")

    raw_type = (_text(record.get("type")) or "").upper()
    try:
        tx_type = _LEGACY_TYPES.get(raw_type) or TransactionType(raw_type)
    except ValueError:
        raise TransactionValidationError(
            f"unknown transaction type {record.get('type')!r}", transaction_id=tx_id, field="type"
        ) from None

    symbol = _text(record.get("assetSymbol"))
    if symbol is None:
        raise TransactionValidationError("assetSymbol is required", transaction_id=tx_id, field="assetSymbol")

    common = {
        "id": tx_id,
        "date": parse_date(record.get("date"), tx_id=tx_id),
        "symbol": symbol,
        "amount": _number(record.get("amount"), field="amount", tx_id=tx_id),
        "notes": _text(record.get("notes")),
        "fee": _number(record.get("fee"), field="fee", tx_id=tx_id, default=0.0),
        "fee_currency": _text(record.get("feeCurrency")),
    }
    price = _number(record.get("pricePerUnit"), field="pricePerUnit", tx_id=tx_id, default=0.0)

    if tx_type is TransactionType.DEPOSIT:
        return Deposit(
            **common,
            price_per_unit=price,
            payment=_payment(record, tx_id),
            lp_range=_lp_range(record.get("lpRange"), tx_id),
            monitor_symbol=_text(record.get("monitorSymbol")),
            linked_transaction_id=_text(record.get("linkedTransactionId")),
        )
    if tx_type is TransactionType.WITHDRAWAL:
        return Withdrawal(
            **common,
            price_per_unit=price,
            linked_transaction_id=_text(record.get("linkedTransactionId")),
        )
    if tx_type is TransactionType.INTEREST:
        return Interest(
            **common,
            price_per_unit=price,
            interest_type=_interest_type(record.get("interestType"), tx_id),
            platform=_text(record.get("platform")),
            related_symbols=_related_symbols(record),
        )
    return Transfer(
        **common,
        source=_text(record.get("source")),
        platform=_text(record.get("platform")),
    )


def parse_transactions(records: Iterable[Mapping[str, Any]]) -> list[Transaction]:
    return [parse_transaction(record) for record in records]


def _reward_tokens(value: Any, symbol: str) -> tuple[str, ...] | None:
    if value is None:
        return None
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        raise TransactionValidationError(
            f"rewardTokens for {symbol} must be a list of symbols", field="rewardTokens"
        )
    if not all(isinstance(token, str) and token.strip() for token in value):
        raise TransactionValidationError(
            f"rewardTokens for {symbol} must contain non-empty strings", field="rewardTokens"
        )
    return tuple(normalize_symbol(token) for token in value)


def parse_overrides(raw: Mapping[str, Mapping[str, Any]] | None) -> dict[str, AssetOverride]:
    """Build ``{SYMBOL: AssetOverride}`` from ``{symbol: {"avgBuyPrice", "rewardTokens"}}``."""

    overrides: dict[str, AssetOverride] = {}
    for symbol, values in (raw or {}).items():
        if not isinstance(values, Mapping):
            continue
        key = normalize_symbol(symbol)
        avg = values.get("avgBuyPrice")
        overrides[key] = AssetOverride(
            avg_buy_price=(
                _number(avg, field="avgBuyPrice", tx_id=None) if avg not in (None, "") else None
            ),
            reward_tokens=_reward_tokens(values.get("rewardTokens"), key),
        )
    return overrides


def normalize_prices(raw: Mapping[str, Any] | None) -> dict[str, float]:
    """Return ``{SYMBOL: price}``; unusable quotes are dropped and read as 0."""

    prices: dict[str, float] = {}
    for symbol, value in (raw or {}).items():
        if value is None or isinstance(value, bool):
            continue
        try:
            price = float(value)
        except (TypeError, ValueError):
            continue
        if not math.isfinite(price) or price < 0:
            continue
        prices[normalize_symbol(symbol)] = price
    return prices


__all__ = [
    "parse_date",
    "parse_transaction",
    "parse_transactions",
    "parse_overrides",
    "normalize_prices",
]
