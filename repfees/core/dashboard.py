# /repfees/core/dashboard.py
# Gathers everything the profitability page shows in one concurrent pass.
import asyncio
import math
import time
from datetime import datetime
from typing import Callable

from pydantic import BaseModel, ConfigDict

from repfees.core.config import settings
from repfees.core.decorators import retry_read
from repfees.core.fee_window import FeeWindow, FeeWindowReader
from repfees.core.fixed_point import ETH_DECIMALS, GWEI_DECIMALS, REP_DECIMALS, from_units, to_units
from repfees.core.logger import get_logger
from repfees.core.profitability import ProfitabilityResult, calculate_profitability

log = get_logger(__name__)


class CalculatorInputs(BaseModel):
    """The six calculator inputs, amounts in their smallest units."""
    model_config = ConfigDict(frozen=True)

    fees: int
    gas_price: int
    gas_used: int
    rep: int
    rep_eth_price: float
    stake: int

    def calculate(self) -> ProfitabilityResult:
        return calculate_profitability(
            self.fees, self.gas_price, self.gas_used, self.rep, self.rep_eth_price, self.stake,
        )


class DashboardSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    rep_eth_price: float
    gas_price: int
    current_window: FeeWindow
    next_window: FeeWindow
    inputs: CalculatorInputs
    result: ProfitabilityResult
    ends_in: str


def default_inputs(window: FeeWindow, rep_eth_price: float, gas_price: int) -> CalculatorInputs:
    """Calculator inputs pre-filled from the current window and the oracles."""
    return CalculatorInputs(
        fees=window.balance,
        gas_price=gas_price,
        gas_used=settings.DEFAULT_GAS_USED,
        rep=to_units(settings.DEFAULT_REP, REP_DECIMALS),
        rep_eth_price=rep_eth_price,
        stake=window.total_stake,
    )


def format_countdown(end_time: datetime, now: float) -> str:
    """Time left until ``end_time`` as ``HH:MM:SS``; hours grow past two digits, overdue is prefixed with ``-``."""
    remaining = math.floor(end_time.timestamp() - now + 0.5)
    sign = "-" if remaining < 0 else ""
    minutes, secs = divmod(abs(remaining), 60)
    hours, minutes = divmod(minutes, 60)
    return f"{sign}{hours:02d}:{minutes:02d}:{secs:02d}"


class FeeWindowDashboard:
    """
    Read side of the profitability page. Every network read goes through
    retry_read; the previous window is fetched separately because resolving
    its end block takes many requests.
    """
    def __init__(self, reader: FeeWindowReader, oracle,
                 max_attempts: int = settings.RETRY_ATTEMPTS,
                 backoff_s: float = settings.RETRY_BACKOFF_S,
                 clock: Callable[[], float] = time.time):
        self.reader = reader
        self.oracle = oracle
        self.max_attempts = max_attempts
        self.backoff_s = backoff_s
        self.clock = clock

    async def _retry(self, operation):
        return await retry_read(operation, max_attempts=self.max_attempts, backoff_s=self.backoff_s)

    async def snapshot(self) -> DashboardSnapshot:
        rep_eth_price, gas_price, current, nxt = await asyncio.gather(
            self._retry(self.oracle.get_rep_eth_price),
            self._retry(self.oracle.get_gas_price),
            self._retry(self.reader.get_current_window),
            self._retry(self.reader.get_next_window),
        )
        inputs = default_inputs(current, rep_eth_price, gas_price)
        log.info(
            "DASHBOARD_SNAPSHOT",
            current=current.address,
            next=nxt.address,
            fees_eth=str(from_units(current.balance, ETH_DECIMALS)),
            stake_rep=str(from_units(current.total_stake, REP_DECIMALS)),
            gas_price_gwei=str(from_units(gas_price, GWEI_DECIMALS)),
            rep_eth_price=rep_eth_price,
        )
        return DashboardSnapshot(
            rep_eth_price=rep_eth_price,
            gas_price=gas_price,
            current_window=current,
            next_window=nxt,
            inputs=inputs,
            result=inputs.calculate(),
            ends_in=format_countdown(current.end_time, self.clock()),
        )

    async def previous_window(self) -> FeeWindow:
        return await self._retry(self.reader.get_previous_window)
