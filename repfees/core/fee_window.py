# /repfees/core/fee_window.py
import asyncio
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict

from pydantic import BaseModel, ConfigDict, computed_field

from repfees.core.block_resolver import BlockResolver, step_blocks_for
from repfees.core.errors import FeeWindowError, WindowNotOverError
from repfees.core.fixed_point import div_to_real
from repfees.core.logger import get_logger

log = get_logger(__name__)


class FeeWindow(BaseModel):
    """Snapshot of one fee window. ``balance`` is in wei, ``total_stake`` in the smallest REP unit."""
    model_config = ConfigDict(frozen=True)

    address: str
    balance: int
    total_stake: int
    end_time: datetime

    @computed_field
    @property
    def fee_per_stake(self) -> float:
        """ETH earned per REP staked if the window closed now."""
        if self.total_stake == 0:
            return float("inf") if self.balance else 0.0
        return div_to_real(self.balance, self.total_stake)


class BlockNumberCache:
    """
    Resolved historical block per fee window address.

    Entries never expire; the cache lives exactly as long as its owner.
    Concurrent lookups of an address that is still being resolved share the
    one running resolution instead of starting their own.
    """
    def __init__(self):
        self._blocks: Dict[str, int] = {}
        self._pending: Dict[str, asyncio.Task] = {}

    def __contains__(self, address: str) -> bool:
        return address.lower() in self._blocks

    def __len__(self) -> int:
        return len(self._blocks)

    def get(self, address: str) -> int | None:
        return self._blocks.get(address.lower())

    async def get_or_resolve(self, address: str, resolve: Callable[[], Awaitable[int]]) -> int:
        key = address.lower()
        if key in self._blocks:
            log.debug("BLOCK_CACHE_HIT", address=key, block=self._blocks[key])
            return self._blocks[key]

        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(resolve())
            self._pending[key] = task
            task.add_done_callback(lambda t: self._finish(key, t))
        else:
            log.debug("BLOCK_RESOLUTION_JOINED", address=key)
        # A cancelled caller must not cancel the resolution others are waiting on
        return await asyncio.shield(task)

    def _finish(self, key: str, task: asyncio.Task):
        self._pending.pop(key, None)
        if not task.cancelled() and task.exception() is None:
            self._blocks[key] = task.result()


class FeeWindowReader:
    """
    Reads fee windows from the ledger, either live or as of the block at which
    the window ended.

    Caution: a historical read of a window that is not cached yet needs one
    ledger request per probed block and may be slow.
    """
    def __init__(self, ledger, resolver: BlockResolver | None = None,
                 cache: BlockNumberCache | None = None, clock: Callable[[], float] = time.time):
        self.ledger = ledger
        self.resolver = resolver or BlockResolver(ledger)
        self.cache = cache if cache is not None else BlockNumberCache()
        self.clock = clock

    async def get_window(self, address: str, is_historical: bool = True) -> FeeWindow:
        try:
            if is_historical:
                balance, total_stake, end_time = await self._read_historical(address)
            else:
                end_time, total_stake, balance = await asyncio.gather(
                    self.ledger.get_end_time(address),
                    self.ledger.get_total_fee_stake(address),
                    self.ledger.get_balance(address),
                )
        except FeeWindowError as e:
            raise e.with_context("get_window")

        return FeeWindow(
            address=address.lower(),
            balance=balance,
            total_stake=total_stake,
            end_time=datetime.fromtimestamp(end_time, tz=timezone.utc),
        )

    async def _read_historical(self, address: str):
        end_time = await self.ledger.get_end_time(address)
        elapsed = self.clock() - end_time
        if elapsed <= 0:
            raise WindowNotOverError(f"fee window {address.lower()} is not over yet, ends in {-elapsed:.0f}s")

        async def resolve() -> int:
            head = await self.ledger.get_block_number()
            block = await self.resolver.find_block(end_time, 0, head, step_blocks_for(elapsed))
            log.info("FEE_WINDOW_END_BLOCK_RESOLVED", address=address.lower(), end_time=end_time, block=block, head=head)
            return block

        block = await self.cache.get_or_resolve(address, resolve)
        balance, total_stake = await asyncio.gather(
            self.ledger.get_balance(address, block),
            self.ledger.get_total_fee_stake(address, block),
        )
        return balance, total_stake, end_time

    async def get_current_window(self) -> FeeWindow:
        try:
            address = await self.ledger.get_current_fee_window_address()
            return await self.get_window(address, is_historical=False)
        except FeeWindowError as e:
            raise e.with_context("get_current_window")

    async def get_next_window(self) -> FeeWindow:
        try:
            address = await self.ledger.get_next_fee_window_address()
            return await self.get_window(address, is_historical=False)
        except FeeWindowError as e:
            raise e.with_context("get_next_window")

    async def get_previous_window(self) -> FeeWindow:
        try:
            address = await self.ledger.get_previous_fee_window_address()
            return await self.get_window(address, is_historical=True)
        except FeeWindowError as e:
            raise e.with_context("get_previous_window")
