import pytest

from repfees.adapters.mock import MockLedger
from repfees.core.errors import NetworkError

GENESIS = 1_500_000_000
WINDOW = "0xAbCdEf0123456789aBcDeF0123456789abCDef01"
NEXT_WINDOW = "0x1111111111111111111111111111111111111111"
PREVIOUS_WINDOW = "0x2222222222222222222222222222222222222222"
ETH = 10**18


def make_timestamps(count: int) -> list:
    """Roughly 15s blocks with a little jitter, strictly increasing."""
    return [GENESIS + 15 * i + (i * 7) % 5 for i in range(count)]


class StaticOracle:
    def __init__(self, gas_price: int = 2 * 10**9, rep_eth_price: float = 0.05):
        self.gas_price = gas_price
        self.rep_eth_price = rep_eth_price
        self.calls = 0
        self.failures = 0

    async def get_gas_price(self) -> int:
        self.calls += 1
        if self.failures:
            self.failures -= 1
            raise NetworkError("get_gas_price: forced failure")
        return self.gas_price

    async def get_rep_eth_price(self) -> float:
        self.calls += 1
        return self.rep_eth_price


@pytest.fixture
def timestamps():
    return make_timestamps(2_000)


@pytest.fixture
def ledger(timestamps):
    """Chain of 2000 blocks. The previous window ended at block 1500 and
    collected more fees afterwards; the current window ends a day after the head."""
    ledger = MockLedger(timestamps)
    head_time = timestamps[-1]
    ledger.set_window(PREVIOUS_WINDOW, end_time=timestamps[1500], balance=3 * ETH, total_stake=600 * ETH)
    ledger.set_window(PREVIOUS_WINDOW, end_time=timestamps[1500], balance=4 * ETH, total_stake=650 * ETH, from_block=1501)
    ledger.set_window(WINDOW, end_time=head_time + 86_400, balance=2 * ETH, total_stake=1_000 * ETH)
    ledger.set_window(NEXT_WINDOW, end_time=head_time + 86_400 * 8, balance=ETH // 10, total_stake=0)
    ledger.set_universe(current=WINDOW, next=NEXT_WINDOW, previous=PREVIOUS_WINDOW)
    return ledger


@pytest.fixture
def now(timestamps):
    return timestamps[-1] + 5


@pytest.fixture
def oracle():
    return StaticOracle()
