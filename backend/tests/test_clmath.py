from __future__ import annotations

import math

import pytest

from crypto_ledger import LedgerError
from crypto_ledger.clmath import (
    amounts_for_liquidity,
    impermanent_loss,
    liquidity_from_amount0,
    liquidity_from_amount1,
    position_delta,
    price_for_target_split,
    project_position_value,
    required_amounts,
)


@pytest.mark.parametrize("current", [1000, 1500, 2000, 2500, 4000])
def test_required_amounts_are_worth_the_deposit(current):
    split = required_amounts(current, 1500, 2500, 1000)
    assert split.amount0 * current + split.amount1 == pytest.approx(1000)
    assert split.split0 + split.split1 == pytest.approx(100)


def test_out_of_range_positions_hold_a_single_token():
    below = required_amounts(1000, 1500, 2500, 1000)
    assert below.amount1 == 0
    assert below.split0 == pytest.approx(100)
    above = required_amounts(3000, 1500, 2500, 1000)
    assert above.amount0 == 0
    assert above.amount1 == pytest.approx(1000)


def test_liquidity_helpers_agree_with_amounts():
    sqrt_p, sqrt_pa, sqrt_pb = math.sqrt(2000), math.sqrt(1500), math.sqrt(2500)
    amounts = amounts_for_liquidity(sqrt_p, sqrt_pa, sqrt_pb, 100)
    assert liquidity_from_amount0(sqrt_p, sqrt_pb, amounts.amount0) == pytest.approx(100)
    assert liquidity_from_amount1(sqrt_p, sqrt_pa, amounts.amount1) == pytest.approx(100)


def test_projection_at_entry_price_matches_deposit():
    split = required_amounts(2000, 1500, 2500, 1000)
    value = project_position_value(2000, 1500, 2500, split.liquidity)
    assert value.value == pytest.approx(1000)


def test_impermanent_loss():
    unchanged = impermanent_loss(2000, 2000, 1500, 2500, 1000)
    assert unchanged.il_quote == pytest.approx(0, abs=1e-9)
    assert unchanged.lp_value == pytest.approx(unchanged.held_value)

    for target in (1200, 1800, 2300, 3000):
        moved = impermanent_loss(2000, target, 1500, 2500, 1000)
        assert moved.il_quote < 0
        assert moved.il_percentage == pytest.approx(moved.il_quote / moved.held_value * 100)


def test_price_for_target_split():
    price = price_for_target_split(50, 1500, 2500)
    assert 1500 < price < 2500
    assert required_amounts(price, 1500, 2500, 1000).split0 == pytest.approx(50, abs=0.01)


def test_position_delta_tracks_base_exposure():
    split = required_amounts(2000, 1500, 2500, 1000)
    assert position_delta(2000, 1500, 2500, split.liquidity) == pytest.approx(split.amount0)
    assert position_delta(3000, 1500, 2500, split.liquidity) == 0
    below = position_delta(1000, 1500, 2500, split.liquidity)
    assert below == pytest.approx(amounts_for_liquidity(math.sqrt(1000), math.sqrt(1500), math.sqrt(2500), split.liquidity).amount0)


@pytest.mark.parametrize(("lower", "upper"), [(2500, 1500), (1500, 1500), (0, 2500), (-1, 2500)])
def test_invalid_ranges_are_rejected(lower, upper):
    with pytest.raises(LedgerError):
        required_amounts(2000, lower, upper, 1000)


def test_non_positive_price_is_rejected():
    with pytest.raises(LedgerError):
        project_position_value(0, 1500, 2500, 10)
