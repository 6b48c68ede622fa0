"""Builders for typed ledger transactions used across the suite."""

from __future__ import annotations

from datetime import date

from crypto_ledger.models import Deposit, Interest, Transfer, Withdrawal

DAY_1 = date(2023, 1, 1)
DAY_2 = date(2023, 1, 2)
DAY_3 = date(2023, 1, 3)


def deposit(tx_id: str, symbol: str, amount: float, price: float = 0.0, *, on: date = DAY_1, **extra) -> Deposit:
    return Deposit(id=tx_id, date=on, symbol=symbol, amount=amount, price_per_unit=price, **extra)


def withdrawal(tx_id: str, symbol: str, amount: float, price: float = 0.0, *, on: date = DAY_1, **extra) -> Withdrawal:
    return Withdrawal(id=tx_id, date=on, symbol=symbol, amount=amount, price_per_unit=price, **extra)


def interest(tx_id: str, symbol: str, amount: float, *, on: date = DAY_1, **extra) -> Interest:
    return Interest(id=tx_id, date=on, symbol=symbol, amount=amount, **extra)


def transfer(tx_id: str, symbol: str, amount: float, *, on: date = DAY_1, **extra) -> Transfer:
    return Transfer(id=tx_id, date=on, symbol=symbol, amount=amount, **extra)


def by_symbol(assets):
    return {asset.symbol: asset for asset in assets}
