# /repfees/api.py
# JSON surface for the profitability page.
import uuid

from aiohttp import web
from pydantic import BaseModel
from web3 import AsyncWeb3
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from structlog.contextvars import clear_contextvars

from repfees.core.dashboard import CalculatorInputs, FeeWindowDashboard
from repfees.core.errors import FeeWindowError, MalformedResponseError, NetworkError, WindowNotOverError
from repfees.core.fixed_point import ETH_DECIMALS, GWEI_DECIMALS, REP_DECIMALS, to_units
from repfees.core.logger import get_logger, bind_request
from repfees.core.profitability import ProfitabilityResult

log = get_logger(__name__)

DASHBOARD = web.AppKey("dashboard", FeeWindowDashboard)


class ProfitabilityReport(BaseModel):
    inputs: CalculatorInputs
    result: ProfitabilityResult


ERROR_STATUS = {
    WindowNotOverError: 409,
    NetworkError: 502,
    MalformedResponseError: 502,
}


@web.middleware
async def error_middleware(request, handler):
    """Maps read failures to JSON errors; a failed read never takes the server down."""
    clear_contextvars()
    bind_request(uuid.uuid4().hex)
    try:
        return await handler(request)
    except FeeWindowError as e:
        status = ERROR_STATUS.get(type(e), 500)
        log.error("REQUEST_FAILED", path=request.path, kind=type(e).__name__, error=str(e))
        return web.json_response({"error": type(e).__name__, "detail": str(e)}, status=status)


def _param(request, name: str, parse, default=None):
    raw = request.query.get(name)
    if raw is None:
        if default is None:
            raise web.HTTPBadRequest(text=f"missing query parameter {name!r}")
        raw = default
    try:
        return parse(raw)
    except (TypeError, ValueError) as e:
        raise web.HTTPBadRequest(text=f"invalid {name!r}: {e}") from e


def _json(model: BaseModel) -> web.Response:
    # non-finite floats are written as null
    return web.Response(text=model.model_dump_json(), content_type="application/json")


def _address(raw: str) -> str:
    # checksum casing is not enforced
    if not AsyncWeb3.is_address(raw.lower()):
        raise ValueError(f"not a hex address: {raw!r}")
    return raw


def _flag(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes"):
        return True
    if value in ("0", "false", "no"):
        return False
    raise ValueError(f"expected a boolean, got {raw!r}")


async def healthz(request):
    """Provides a JSON health status for the service."""
    return web.json_response({"status": "ok"})


async def metrics(request):
    return web.Response(body=generate_latest(), headers={"Content-Type": CONTENT_TYPE_LATEST})


async def snapshot(request):
    snap = await request.app[DASHBOARD].snapshot()
    return _json(snap)


async def current_window(request):
    window = await request.app[DASHBOARD].reader.get_current_window()
    return _json(window)


async def next_window(request):
    window = await request.app[DASHBOARD].reader.get_next_window()
    return _json(window)


async def previous_window(request):
    window = await request.app[DASHBOARD].previous_window()
    return _json(window)


async def window_by_address(request):
    historical = _param(request, "historical", _flag, default="true")
    try:
        address = _address(request.match_info["address"])
    except ValueError as e:
        raise web.HTTPBadRequest(text=str(e)) from e
    window = await request.app[DASHBOARD].reader.get_window(address, historical)
    return _json(window)


async def profitability(request):
    """Recalculates the profit figures; fees in ETH, gas price in gwei, rep and stake in REP."""
    inputs = CalculatorInputs(
        fees=_param(request, "fees", lambda v: to_units(v, ETH_DECIMALS)),
        gas_price=_param(request, "gas_price", lambda v: to_units(v, GWEI_DECIMALS)),
        gas_used=_param(request, "gas_used", int),
        rep=_param(request, "rep", lambda v: to_units(v, REP_DECIMALS)),
        rep_eth_price=_param(request, "rep_eth_price", float),
        stake=_param(request, "stake", lambda v: to_units(v, REP_DECIMALS)),
    )
    try:
        result = inputs.calculate()
    except ValueError as e:
        raise web.HTTPBadRequest(text=str(e)) from e
    return _json(ProfitabilityReport(inputs=inputs, result=result))


def create_app(dashboard: FeeWindowDashboard) -> web.Application:
    app = web.Application(middlewares=[error_middleware])
    app[DASHBOARD] = dashboard
    app.add_routes([
        web.get("/healthz", healthz),
        web.get("/metrics", metrics),
        web.get("/snapshot", snapshot),
        web.get("/windows/current", current_window),
        web.get("/windows/next", next_window),
        web.get("/windows/previous", previous_window),
        web.get("/windows/{address}", window_by_address),
        web.get("/profitability", profitability),
    ])
    return app
