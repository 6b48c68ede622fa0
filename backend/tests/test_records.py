from __future__ import annotations

import math
from datetime import date

import pytest

from crypto_ledger import (
    Deposit,
    Interest,
    Transfer,
    TransactionValidationError,
    Withdrawal,
    normalize_prices,
    parse_overrides,
    parse_transaction,
    parse_transactions,
)
from crypto_ledger.models import InterestType


def _record(**fields):
    base = {"id": "tx-1", "type": "DEPOSIT", "assetSymbol": " eth ", "amount": 2, "date": "2023-01-01"}
    base.update(fields)
    return base


def test_cross_funded_lp_deposit():
    tx = parse_transaction(
        _record(
            pricePerUnit="1500",
            paymentCurrency="usdc",
            paymentAmount=3000,
            lpRange={"min": 1200, "max": 1800},
            monitorSymbol="eth/usdc",
        )
    )
    assert isinstance(tx, Deposit)
    assert tx.symbol == "ETH"
    assert tx.price_per_unit == 1500
    assert tx.payment.currency == "USDC"
    assert tx.payment.amount == 3000
    assert tx.lp_range.contains(1800)
    assert tx.monitor_symbol == "ETH/USDC"
    assert tx.date == date(2023, 1, 1)


def test_missing_price_defaults_to_zero():
    tx = parse_transaction(_record())
    assert tx.price_per_unit == 0
    assert tx.notional == 0
    assert tx.payment is None


def test_legacy_trade_types_are_mapped():
    assert isinstance(parse_transaction(_record(type="BUY")), Deposit)
    assert isinstance(parse_transaction(_record(type="sell")), Withdrawal)


def test_interest_related_symbols():
    tx = parse_transaction(
        _record(type="INTEREST", interestType="farming", relatedAssetSymbols=["lp-eth-usdc", "", "cake"])
    )
    assert isinstance(tx, Interest)
    assert tx.interest_type is InterestType.FARMING
    assert tx.related_symbols == ("LP-ETH-USDC", "CAKE")

    single = parse_transaction(_record(type="INTEREST", relatedAssetSymbol="pool-x"))
    assert single.related_symbols == ("POOL-X",)


def test_transfer_keeps_venues():
    tx = parse_transaction(_record(type="TRANSFER", source="Binance", platform="Ledger", fee=0.001, feeCurrency="eth"))
    assert isinstance(tx, Transfer)
    assert tx.source == "Binance"
    assert tx.fee == 0.001
    assert tx.fee_currency == "ETH"


def test_datetime_strings_are_truncated_to_the_day():
    assert parse_transaction(_record(date="2023-03-04T10:11:12Z")).date == date(2023, 3, 4)


@pytest.mark.parametrize(
    ("fields", "field"),
    [
        ({"type": "SWAP"}, "type"),
        ({"amount": None}, "amount"),
        ({"amount": "lots"}, "amount"),
        ({"amount": -1}, "amount"),
        ({"amount": math.nan}, "amount"),
        ({"amount": True}, "amount"),
        ({"pricePerUnit": math.inf}, "pricePerUnit"),
        ({"date": "01/02/2023"}, "date"),
        ({"date": "2023-01-0199"}, "date"),
        ({"date": "2023-01-01junk"}, "date"),
        ({"date": "2023-01-01T25:00:00"}, "date"),
        ({"date": None}, "date"),
        ({"assetSymbol": "  "}, "assetSymbol"),
        ({"paymentAmount": 10}, "paymentCurrency"),
        ({"paymentCurrency": "USDC"}, "paymentAmount"),
        ({"lpRange": {"min": 2, "max": 1}}, "lpRange"),
        ({"type": "INTEREST", "interestType": "MINING"}, "interestType"),
    ],
)
def test_malformed_records_are_rejected(fields, field):
    with pytest.raises(TransactionValidationError) as excinfo:
        parse_transaction(_record(**fields))
    assert excinfo.value.field == field
    assert excinfo.value.transaction_id == "tx-1"
    assert str(excinfo.value).startswith("Transaction tx-1: ")


def test_missing_id_is_rejected():
    with pytest.raises(TransactionValidationError) as excinfo:
        parse_transaction(_record(id=None))
    assert excinfo.value.field == "id"


def test_parse_transactions_keeps_order():
    parsed = parse_transactions([_record(id="b"), _record(id="a", type="WITHDRAWAL")])
    assert [tx.id for tx in parsed] == ["b", "a"]


def test_overrides_are_keyed_by_normalized_symbol():
    overrides = parse_overrides({"eth ": {"avgBuyPrice": "1800", "rewardTokens": ["arb"]}, "sol": {}})
    assert overrides["ETH"].avg_buy_price == 1800
    assert overrides["ETH"].reward_tokens == ("ARB",)
    assert overrides["SOL"].avg_buy_price is None
    assert overrides["SOL"].reward_tokens is None


def test_unusable_prices_are_dropped():
    prices = normalize_prices({"eth": "2000.5", "btc": None, "sol": -1, "doge": "n/a", "ada": math.nan, "usd": True})
    assert prices == {"ETH": 2000.5}


def test_datetime_with_offset_keeps_its_calendar_day():
    assert parse_transaction(_record(date="2023-03-04 23:30:00+04:00")).date == date(2023, 3, 4)


@pytest.mark.parametrize("tokens", ["ARB", [1], ["ARB", None], ["  "], {"ARB": 1}])
def test_malformed_reward_tokens_are_rejected(tokens):
    with pytest.raises(TransactionValidationError) as excinfo:
        parse_overrides({"eth": {"rewardTokens": tokens}})
    assert excinfo.value.field == "rewardTokens"
    assert "ETH" in str(excinfo.value)


def test_empty_reward_token_list_is_kept():
    assert parse_overrides({"eth": {"rewardTokens": []}})["ETH"].reward_tokens == ()
