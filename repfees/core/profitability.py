# /repfees/core/profitability.py
import math
from typing import Union

from pydantic import BaseModel, ConfigDict, computed_field

from repfees.core.fixed_point import ceil_div, div, div_to_real, mul_real, pow_real, sqrt

# One fee window lasts roughly a week
WINDOW_DAYS = 7
WINDOWS_PER_YEAR = 365 / WINDOW_DAYS


class ProfitabilityResult(BaseModel):
    """Profit figures for committing ``rep`` to a fee window.

    Amount fields are fixed-point ints (wei, or wei per gas for
    ``gas_price_break_even``, or the smallest REP unit). Ratio fields are
    floats where ``1.0`` means 100%. ``num_rep_break_even`` is ``math.inf``
    when the window's fees cannot cover the gas cost at any stake.
    """
    model_config = ConfigDict(frozen=True)

    gas_cost: int
    total_fee_profit: int
    total_profit: int
    profit_per_rep: float
    profit_percent: float
    profit_percent_pa: float
    num_rep_break_even: Union[int, float]
    gas_price_break_even: int
    num_rep_max_profit_per_rep: int

    @computed_field
    @property
    def has_break_even(self) -> bool:
        return not math.isinf(self.num_rep_break_even)


def _ratio(numerator: int, denominator: int) -> float:
    if denominator == 0:
        return math.nan if numerator == 0 else math.copysign(math.inf, numerator)
    return div_to_real(numerator, denominator)


def _profit_percent(total_profit: int, gas_cost: int, rep: int, rep_eth_price: float) -> float:
    if not math.isfinite(rep_eth_price):
        return total_profit / (gas_cost + rep * rep_eth_price)
    return _ratio(total_profit, gas_cost + mul_real(rep, rep_eth_price))


def calculate_profitability(fees: int, gas_price: int, gas_used: int, rep: int,
                            rep_eth_price: float, stake: int) -> ProfitabilityResult:
    """Calculates the profit of buying participation tokens with ``rep``.

    Args:
        fees: Fees collected by the fee window, in wei.
        gas_price: Gas price in wei per gas.
        gas_used: Gas for both transactions (buying participation tokens and redeeming).
        rep: REP the caller plans to commit, smallest unit.
        rep_eth_price: ETH per REP.
        stake: REP already staked in the window by everyone else, smallest unit.
    """
    if rep <= 0:
        raise ValueError("rep must be positive")
    if gas_used <= 0:
        raise ValueError("gas_used must be positive")
    if fees < 0 or gas_price < 0 or stake < 0:
        raise ValueError("fees, gas_price and stake must not be negative")

    gas_cost = gas_price * gas_used
    total_fee_profit = div(fees * rep, stake + rep)
    total_profit = total_fee_profit - gas_cost
    profit_per_rep = div_to_real(total_profit, rep)
    profit_percent = _profit_percent(total_profit, gas_cost, rep, rep_eth_price)
    profit_percent_pa = pow_real(1 + profit_percent, WINDOWS_PER_YEAR) - 1
    gas_price_break_even = div(total_fee_profit, gas_used)

    divisor = fees - gas_cost
    num_rep_break_even = math.inf
    num_rep_max_profit_per_rep = 0
    if divisor > 0:
        # Any REP below break-even loses money, so round up
        num_rep_break_even = ceil_div(gas_cost * stake, divisor)
        num_rep_max_profit_per_rep = num_rep_break_even + sqrt(num_rep_break_even * (num_rep_break_even + stake))

    return ProfitabilityResult(
        gas_cost=gas_cost,
        total_fee_profit=total_fee_profit,
        total_profit=total_profit,
        profit_per_rep=profit_per_rep,
        profit_percent=profit_percent,
        profit_percent_pa=profit_percent_pa,
        num_rep_break_even=num_rep_break_even,
        gas_price_break_even=gas_price_break_even,
        num_rep_max_profit_per_rep=num_rep_max_profit_per_rep,
    )
