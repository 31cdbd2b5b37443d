# /repfees/adapters/mock.py
# In-memory ledger used by unit tests and local runs without an RPC endpoint.
import asyncio
from bisect import bisect_right
from collections import Counter
from typing import Dict, List, Tuple

from repfees.adapters.ledger import LedgerClient
from repfees.core.errors import NetworkError
from repfees.core.logger import get_logger

log = get_logger(__name__)


class MockLedger(LedgerClient):
    """
    A mock implementation of LedgerClient for testing purposes.

    Blocks are described by a list of timestamps (index = block number, the
    last index is the chain head). Fee window values are recorded as
    snapshots that take effect from a given block, so historical reads see
    the value that was current at the requested height.
    """
    def __init__(self, timestamps: List[int] | None = None):
        self.timestamps = list(timestamps or [0])
        # address -> end time
        self.end_times: Dict[str, int] = {}
        # address -> sorted [(from_block, balance, total_stake)]
        self.snapshots: Dict[str, List[Tuple[int, int, int]]] = {}
        self.universe_windows: Dict[str, str] = {}
        self.calls: Counter = Counter()
        self.blocks_read: List[int] = []
        self._failures: Counter = Counter()
        log.info("MOCK_LEDGER_INITIALIZED", head=self.head)

    @property
    def head(self) -> int:
        return len(self.timestamps) - 1

    def set_window(self, address: str, end_time: int, balance: int, total_stake: int, from_block: int = 0):
        key = address.lower()
        self.end_times[key] = end_time
        history = [s for s in self.snapshots.get(key, []) if s[0] != from_block]
        history.append((from_block, balance, total_stake))
        self.snapshots[key] = sorted(history)

    def set_universe(self, current: str | None = None, next: str | None = None, previous: str | None = None):
        for name, address in (("current", current), ("next", next), ("previous", previous)):
            if address is not None:
                self.universe_windows[name] = address

    def fail_next(self, method: str, times: int = 1):
        """Configure the mock to raise a NetworkError on the next ``times`` calls of ``method``."""
        self._failures[method] += times

    async def close(self):
        pass

    async def _call(self, method: str):
        await asyncio.sleep(0)
        self.calls[method] += 1
        if self._failures[method] > 0:
            self._failures[method] -= 1
            log.error("MOCK_LEDGER_FORCED_FAILURE", method=method)
            raise NetworkError(f"{method}: forced failure")

    def _snapshot(self, address: str, block: int | None) -> Tuple[int, int, int]:
        history = self.snapshots.get(address.lower())
        if not history:
            raise NetworkError(f"unknown fee window {address}")
        height = self.head if block is None else block
        idx = bisect_right([s[0] for s in history], height) - 1
        if idx < 0:
            return (0, 0, 0)
        return history[idx]

    async def _universe(self, method: str, name: str) -> str:
        await self._call(method)
        if name not in self.universe_windows:
            raise NetworkError(f"{method}: no {name} fee window")
        return self.universe_windows[name]

    async def get_current_fee_window_address(self) -> str:
        return await self._universe("getCurrentFeeWindow", "current")

    async def get_next_fee_window_address(self) -> str:
        return await self._universe("getNextFeeWindow", "next")

    async def get_previous_fee_window_address(self) -> str:
        return await self._universe("getPreviousFeeWindow", "previous")

    async def get_balance(self, address: str, block: int | None = None) -> int:
        await self._call("balanceOf")
        return self._snapshot(address, block)[1]

    async def get_total_fee_stake(self, address: str, block: int | None = None) -> int:
        await self._call("getTotalFeeStake")
        return self._snapshot(address, block)[2]

    async def get_end_time(self, address: str, block: int | None = None) -> int:
        await self._call("getEndTime")
        if address.lower() not in self.end_times:
            raise NetworkError(f"getEndTime: unknown fee window {address}")
        return self.end_times[address.lower()]

    async def get_block_number(self) -> int:
        await self._call("blockNumber")
        return self.head

    async def get_block_timestamp(self, number: int) -> int:
        await self._call("getBlock")
        if not 0 <= number <= self.head:
            raise NetworkError(f"getBlock: block {number} does not exist")
        self.blocks_read.append(number)
        return self.timestamps[number]
