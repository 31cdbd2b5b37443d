# /repfees/adapters/ledger.py
# Read-only access to the Augur universe, cash and fee window contracts.
import asyncio

import aiohttp
from web3 import AsyncWeb3
from web3.exceptions import Web3Exception

from repfees.abis import CASH_ABI, FEE_WINDOW_ABI, UNIVERSE_ABI
from repfees.core.config import settings
from repfees.core.errors import NetworkError
from repfees.core.fixed_point import parse_units
from repfees.core.logger import get_logger, LEDGER_READS

log = get_logger(__name__)

TRANSPORT_ERRORS = (Web3Exception, aiohttp.ClientError, asyncio.TimeoutError, OSError)


class LedgerClient:
    """
    Thin async wrapper over web3 that turns every failure into a NetworkError.

    All amounts come back as ints in the asset's smallest unit. ``block=None``
    reads the latest state; an int pins the read to that block.
    """
    def __init__(self, w3: AsyncWeb3,
                 cash_address: str = settings.CASH_CONTRACT_ADDRESS,
                 universe_address: str = settings.UNIVERSE_CONTRACT_ADDRESS,
                 timeout_s: float = settings.REQUEST_TIMEOUT_S):
        self.w3 = w3
        self.timeout_s = timeout_s
        self.cash = w3.eth.contract(address=AsyncWeb3.to_checksum_address(cash_address), abi=CASH_ABI)
        self.universe = w3.eth.contract(address=AsyncWeb3.to_checksum_address(universe_address), abi=UNIVERSE_ABI)

    @classmethod
    def from_settings(cls) -> "LedgerClient":
        provider = AsyncWeb3.AsyncHTTPProvider(settings.rpc_url, request_kwargs={"timeout": settings.REQUEST_TIMEOUT_S})
        log.info("LEDGER_CLIENT_INITIALIZED", custom_rpc=settings.ETH_RPC_URL is not None)
        return cls(AsyncWeb3(provider))

    async def close(self):
        await self.w3.provider.disconnect()

    async def _read(self, method: str, awaitable):
        LEDGER_READS.labels(method).inc()
        try:
            return await asyncio.wait_for(awaitable, self.timeout_s)
        except TRANSPORT_ERRORS as e:
            log.warning("LEDGER_READ_FAILED", method=method, error=repr(e))
            raise NetworkError(f"{method}: {e!r}") from e

    def _fee_window(self, address: str):
        return self.w3.eth.contract(address=AsyncWeb3.to_checksum_address(address), abi=FEE_WINDOW_ABI)

    @staticmethod
    def _at(block: int | None):
        return "latest" if block is None else block

    async def get_current_fee_window_address(self) -> str:
        return await self._read("getCurrentFeeWindow", self.universe.functions.getCurrentFeeWindow().call())

    async def get_next_fee_window_address(self) -> str:
        return await self._read("getNextFeeWindow", self.universe.functions.getNextFeeWindow().call())

    async def get_previous_fee_window_address(self) -> str:
        return await self._read("getPreviousFeeWindow", self.universe.functions.getPreviousFeeWindow().call())

    async def get_balance(self, address: str, block: int | None = None) -> int:
        """Cash (ETH) held by ``address``, in wei."""
        call = self.cash.functions.balanceOf(AsyncWeb3.to_checksum_address(address)).call(block_identifier=self._at(block))
        return parse_units(await self._read("balanceOf", call))

    async def get_total_fee_stake(self, address: str, block: int | None = None) -> int:
        call = self._fee_window(address).functions.getTotalFeeStake().call(block_identifier=self._at(block))
        return parse_units(await self._read("getTotalFeeStake", call))

    async def get_end_time(self, address: str, block: int | None = None) -> int:
        """Window end as a unix timestamp in seconds."""
        call = self._fee_window(address).functions.getEndTime().call(block_identifier=self._at(block))
        return parse_units(await self._read("getEndTime", call))

    async def get_block_number(self) -> int:
        return await self._read("blockNumber", self.w3.eth.block_number)

    async def get_block_timestamp(self, number: int) -> int:
        block = await self._read("getBlock", self.w3.eth.get_block(number, False))
        return block["timestamp"]
