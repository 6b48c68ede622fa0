"""Concentrated-liquidity (Uniswap v3 style) position math.

Token 0 is the base asset and token 1 the quote asset; prices are quoted in
token 1 per token 0. With ``sqrtP`` the square root of the current price and
``sqrtPa``/``sqrtPb`` those of the range bounds, a position of liquidity
``L`` holds::

    x = L * (sqrtPb - sqrtP) / (sqrtP * sqrtPb)
    y = L * (sqrtP - sqrtPa)

clamped to a single token outside the range.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .errors import LedgerError


@dataclass(frozen=True)
class PositionAmounts:
    amount0: float
    amount1: float
    liquidity: float


@dataclass(frozen=True)
class RequiredAmounts:
    amount0: float
    amount1: float
    liquidity: float
    split0: float
    split1: float


@dataclass(frozen=True)
class PositionValue:
    value: float
    amount0: float
    amount1: float


@dataclass(frozen=True)
class ImpermanentLoss:
    lp_value: float
    held_value: float
    il_percentage: float
    il_quote: float


def _check_range(lower_price: float, upper_price: float) -> None:
    if lower_price <= 0 or upper_price <= 0:
        raise LedgerError("Range bounds must be positive")
    if lower_price >= upper_price:
        raise LedgerError("Lower bound must be below upper bound")


def _check_price(price: float) -> None:
    if price <= 0:
        raise LedgerError("Price must be positive")


def liquidity_from_amount0(sqrt_p: float, sqrt_pb: float, amount0: float) -> float:
    return amount0 * sqrt_p * sqrt_pb / (sqrt_pb - sqrt_p)


def liquidity_from_amount1(sqrt_p: float, sqrt_pa: float, amount1: float) -> float:
    return amount1 / (sqrt_p - sqrt_pa)


def amounts_for_liquidity(sqrt_p: float, sqrt_pa: float, sqrt_pb: float, liquidity: float) -> PositionAmounts:
    """Token amounts held by ``liquidity`` at price ``sqrt_p ** 2``."""

    amount0 = 0.0
    amount1 = 0.0
    if sqrt_p <= sqrt_pa:
        amount0 = liquidity * (sqrt_pb - sqrt_pa) / (sqrt_pa * sqrt_pb)
    elif sqrt_p >= sqrt_pb:
        amount1 = liquidity * (sqrt_pb - sqrt_pa)
    else:
        amount0 = liquidity * (sqrt_pb - sqrt_p) / (sqrt_p * sqrt_pb)
        amount1 = liquidity * (sqrt_p - sqrt_pa)
    return PositionAmounts(amount0=amount0, amount1=amount1, liquidity=liquidity)


def required_amounts(
    current_price: float,
    lower_price: float,
    upper_price: float,
    deposit_value: float,
) -> RequiredAmounts:
    """Split a deposit worth ``deposit_value`` (in token 1) across the range."""

    _check_price(current_price)
    _check_range(lower_price, upper_price)
    sqrt_p = math.sqrt(current_price)
    sqrt_pa = math.sqrt(lower_price)
    sqrt_pb = math.sqrt(upper_price)

    if current_price <= lower_price:
        liquidity = (deposit_value / current_price) * (sqrt_pa * sqrt_pb) / (sqrt_pb - sqrt_pa)
    elif current_price >= upper_price:
        liquidity = deposit_value / (sqrt_pb - sqrt_pa)
    else:
        # value = x * P + y, expressed per unit of liquidity
        multiplier = (sqrt_pb - sqrt_p) * sqrt_p / sqrt_pb + (sqrt_p - sqrt_pa)
        liquidity = deposit_value / multiplier

    amounts = amounts_for_liquidity(sqrt_p, sqrt_pa, sqrt_pb, liquidity)
    value0 = amounts.amount0 * current_price
    value1 = amounts.amount1
    total = value0 + value1
    return RequiredAmounts(
        amount0=amounts.amount0,
        amount1=amounts.amount1,
        liquidity=liquidity,
        split0=value0 / total * 100 if total > 0 else 0.0,
        split1=value1 / total * 100 if total > 0 else 0.0,
    )


def project_position_value(
    target_price: float,
    lower_price: float,
    upper_price: float,
    liquidity: float,
) -> PositionValue:
    _check_price(target_price)
    _check_range(lower_price, upper_price)
    amounts = amounts_for_liquidity(
        math.sqrt(target_price), math.sqrt(lower_price), math.sqrt(upper_price), liquidity
    )
    return PositionValue(
        value=amounts.amount0 * target_price + amounts.amount1,
        amount0=amounts.amount0,
        amount1=amounts.amount1,
    )


def impermanent_loss(
    current_price: float,
    target_price: float,
    lower_price: float,
    upper_price: float,
    deposit_value: float,
) -> ImpermanentLoss:
    """Compare the LP value at ``target_price`` with simply holding the deposit."""

    initial = required_amounts(current_price, lower_price, upper_price, deposit_value)
    held_value = initial.amount0 * target_price + initial.amount1
    lp_value = project_position_value(target_price, lower_price, upper_price, initial.liquidity).value
    il_quote = lp_value - held_value
    return ImpermanentLoss(
        lp_value=lp_value,
        held_value=held_value,
        il_percentage=il_quote / held_value * 100 if held_value > 0 else 0.0,
        il_quote=il_quote,
    )


def price_for_target_split(
    target_split0: float,
    lower_price: float,
    upper_price: float,
    iterations: int = 20,
) -> float:
    """Bisect for the price at which token 0 makes up ``target_split0`` % of value."""

    _check_range(lower_price, upper_price)
    low, high = lower_price, upper_price
    # split0 falls monotonically from 100% at the lower bound to 0% at the upper.
    for _ in range(iterations):
        mid = (low + high) / 2
        if required_amounts(mid, lower_price, upper_price, 1000).split0 > target_split0:
            low = mid
        else:
            high = mid
    return (low + high) / 2


def position_delta(current_price: float, lower_price: float, upper_price: float, liquidity: float) -> float:
    """Effective token 0 exposure of the position."""

    _check_price(current_price)
    _check_range(lower_price, upper_price)
    sqrt_p = math.sqrt(current_price)
    sqrt_pa = math.sqrt(lower_price)
    sqrt_pb = math.sqrt(upper_price)
    if current_price <= lower_price:
        return liquidity * (sqrt_pb - sqrt_pa) / (sqrt_pa * sqrt_pb)
    if current_price >= upper_price:
        return 0.0
    return liquidity * (sqrt_pb - sqrt_p) / (sqrt_p * sqrt_pb)


__all__ = [
    "PositionAmounts",
    "RequiredAmounts",
    "PositionValue",
    "ImpermanentLoss",
    "liquidity_from_amount0",
    "liquidity_from_amount1",
    "amounts_for_liquidity",
    "required_amounts",
    "project_position_value",
    "impermanent_loss",
    "price_for_target_split",
    "position_delta",
]
