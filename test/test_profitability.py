import math

import pytest

from repfees.core.profitability import calculate_profitability

ETH = 10**18
GWEI = 10**9


def test_reference_scenario():
    res = calculate_profitability(fees=100, gas_price=1, gas_used=10, rep=50, rep_eth_price=1.0, stake=50)
    assert res.gas_cost == 10
    assert res.total_fee_profit == 50
    assert res.total_profit == 40
    assert res.profit_per_rep == pytest.approx(0.8)
    assert res.profit_percent == pytest.approx(40 / 60)
    assert res.profit_percent_pa == pytest.approx((1 + 40 / 60) ** (365 / 7) - 1)
    assert res.gas_price_break_even == 5
    # ceil(10 * 50 / 90)
    assert res.num_rep_break_even == 6
    assert res.num_rep_max_profit_per_rep == 6 + math.isqrt(6 * 56)
    assert res.has_break_even


@pytest.mark.parametrize("fees,gas_price,gas_used,rep,stake", [
    (3 * ETH, 20 * GWEI, 323_848, ETH, 600 * ETH),
    (0, 5 * GWEI, 100_000, 10 * ETH, 0),
    (10**30, 1, 1, 1, 10**40),
    (7, 0, 3, 2, 5),
])
def test_profit_is_exact_integer_arithmetic(fees, gas_price, gas_used, rep, stake):
    res = calculate_profitability(fees, gas_price, gas_used, rep, 0.05, stake)
    assert res.gas_cost == gas_price * gas_used
    assert res.total_profit == res.total_fee_profit - res.gas_cost
    assert isinstance(res.total_profit, int)


@pytest.mark.parametrize("fees,gas_price,gas_used,stake", [
    (100, 1, 10, 50),
    (3 * ETH, 20 * GWEI, 323_848, 600 * ETH),
    (2 * ETH, 4 * GWEI, 323_848, 1_000 * ETH),
    (12_345_678_901, 3, 1_000, 987_654_321),
])
def test_break_even_is_the_smallest_profitable_rep(fees, gas_price, gas_used, stake):
    res = calculate_profitability(fees, gas_price, gas_used, 10**18, 0.05, stake)
    break_even = res.num_rep_break_even
    assert isinstance(break_even, int)

    at = calculate_profitability(fees, gas_price, gas_used, break_even, 0.05, stake)
    assert at.total_profit >= 0
    if break_even > 1:
        below = calculate_profitability(fees, gas_price, gas_used, break_even - 1, 0.05, stake)
        assert below.total_profit < 0


def test_no_break_even_when_fees_cannot_cover_gas():
    res = calculate_profitability(fees=10, gas_price=1, gas_used=10, rep=50, rep_eth_price=1.0, stake=50)
    assert res.num_rep_break_even == math.inf
    assert res.num_rep_max_profit_per_rep == 0
    assert not res.has_break_even

    res = calculate_profitability(fees=5, gas_price=1, gas_used=10, rep=50, rep_eth_price=1.0, stake=50)
    assert res.num_rep_break_even == math.inf
    assert res.num_rep_max_profit_per_rep == 0
    assert res.total_profit < 0


def test_max_profit_per_rep_beats_its_neighbours():
    fees, gas_price, gas_used, stake = 3 * ETH, 20 * GWEI, 323_848, 600 * ETH
    res = calculate_profitability(fees, gas_price, gas_used, ETH, 0.05, stake)
    best = res.num_rep_max_profit_per_rep

    def per_rep(rep):
        return calculate_profitability(fees, gas_price, gas_used, rep, 0.05, stake).profit_per_rep

    assert per_rep(best) >= per_rep(best // 2)
    assert per_rep(best) >= per_rep(best * 2)


def test_real_world_magnitudes():
    res = calculate_profitability(
        fees=3 * ETH, gas_price=20 * GWEI, gas_used=323_848, rep=ETH, rep_eth_price=0.05, stake=599 * ETH,
    )
    # 1/600 of the fees minus 0.00647696 ETH of gas
    assert res.total_fee_profit == 5 * 10**15
    assert res.gas_cost == 6_476_960 * GWEI
    assert res.total_profit == 5 * 10**15 - 6_476_960 * GWEI
    assert res.profit_per_rep == pytest.approx(-0.00147696)
    assert res.profit_percent == pytest.approx(-0.00147696 / (0.00647696 + 0.05))


def test_non_finite_price_propagates_to_ratios():
    res = calculate_profitability(fees=100, gas_price=1, gas_used=10, rep=50, rep_eth_price=math.inf, stake=50)
    assert res.profit_percent == 0.0
    res = calculate_profitability(fees=100, gas_price=1, gas_used=10, rep=50, rep_eth_price=math.nan, stake=50)
    assert math.isnan(res.profit_percent)
    assert math.isnan(res.profit_percent_pa)


def test_zero_capital_gives_infinite_return_not_zero():
    res = calculate_profitability(fees=100, gas_price=0, gas_used=10, rep=50, rep_eth_price=0.0, stake=50)
    assert res.profit_percent == math.inf


@pytest.mark.parametrize("rep,gas_used", [(0, 10), (50, 0), (-1, 10)])
def test_zero_divisors_are_rejected(rep, gas_used):
    with pytest.raises(ValueError):
        calculate_profitability(fees=100, gas_price=1, gas_used=gas_used, rep=rep, rep_eth_price=1.0, stake=50)


def test_negative_amounts_are_rejected():
    with pytest.raises(ValueError):
        calculate_profitability(fees=-1, gas_price=1, gas_used=10, rep=50, rep_eth_price=1.0, stake=50)
