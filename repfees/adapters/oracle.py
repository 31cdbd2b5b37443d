# /repfees/adapters/oracle.py
from decimal import Decimal, InvalidOperation
import asyncio
import aiohttp

from repfees.core.config import settings
from repfees.core.errors import MalformedResponseError, NetworkError
from repfees.core.logger import get_logger, ORACLE_REQUESTS

log = get_logger(__name__)


class PriceOracle:
    """Gas price and REP/ETH rate from public JSON endpoints."""

    def __init__(self, session: aiohttp.ClientSession | None = None,
                 gas_price_url: str = settings.GAS_PRICE_URL,
                 rep_eth_price_url: str = settings.REP_ETH_PRICE_URL,
                 timeout_s: float = settings.REQUEST_TIMEOUT_S):
        self._session = session
        self._owns_session = session is None
        self.gas_price_url = gas_price_url
        self.rep_eth_price_url = rep_eth_price_url
        self.timeout = aiohttp.ClientTimeout(total=timeout_s)

    @property
    def http(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def close(self):
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "PriceOracle":
        return self

    async def __aexit__(self, *exc):
        await self.close()

    async def _get_json(self, source: str, url: str) -> dict:
        ORACLE_REQUESTS.labels(source).inc()
        try:
            async with self.http.get(url, timeout=self.timeout) as resp:
                resp.raise_for_status()
                data = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            log.warning("ORACLE_REQUEST_FAILED", source=source, error=repr(e))
            raise NetworkError(f"{source}: {e!r}") from e
        if not isinstance(data, dict):
            raise MalformedResponseError(f"{source}: expected a JSON object, got {type(data).__name__}")
        return data

    @staticmethod
    def _field(source: str, data: dict, name: str) -> Decimal:
        value = data.get(name)
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise MalformedResponseError(f"{source}: missing numeric field {name!r}")
        try:
            number = Decimal(str(value))
        except InvalidOperation as e:
            raise MalformedResponseError(f"{source}: field {name!r} is not a number: {value!r}") from e
        if not number.is_finite():
            raise MalformedResponseError(f"{source}: field {name!r} is not finite: {value!r}")
        return number

    async def get_gas_price(self) -> int:
        """Recommended low gas price in wei per gas."""
        data = await self._get_json("get_gas_price", self.gas_price_url)
        safe_low = self._field("get_gas_price", data, "safeLow")
        # safeLow is quoted in tenths of a gwei
        gas_price = int(safe_low * settings.GAS_PRICE_WEI_PER_UNIT)
        log.debug("GAS_PRICE_FETCHED", safe_low=str(safe_low), wei=gas_price)
        return gas_price

    async def get_rep_eth_price(self) -> float:
        """Price of one REP in ETH."""
        data = await self._get_json("get_rep_eth_price", self.rep_eth_price_url)
        price = float(self._field("get_rep_eth_price", data, "ETH"))
        log.debug("REP_ETH_PRICE_FETCHED", price=price)
        return price
