# /main.py
# Serves the fee window dashboard over HTTP.
import asyncio
from aiohttp import web

from repfees.core.config import settings
from repfees.core.logger import configure_logging, get_logger
from repfees.core.fee_window import FeeWindowReader
from repfees.core.dashboard import FeeWindowDashboard
from repfees.core.errors import FeeWindowError
from repfees.adapters.ledger import LedgerClient
from repfees.adapters.oracle import PriceOracle
from repfees.api import create_app


async def main():
    configure_logging()
    log = get_logger("repfees.System")
    log.info("FEE_WINDOW_SERVICE_STARTING")

    ledger = LedgerClient.from_settings()
    oracle = PriceOracle()
    dashboard = FeeWindowDashboard(FeeWindowReader(ledger), oracle)

    app = create_app(dashboard)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "0.0.0.0", settings.HTTP_PORT)
    await site.start()
    log.info("HTTP_SERVER_STARTED", port=settings.HTTP_PORT)

    try:
        # Warm the block cache for the previous window; it needs many requests
        await dashboard.previous_window()
    except FeeWindowError as e:
        log.error("PREVIOUS_WINDOW_PREFETCH_FAILED", error=str(e))

    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
        await oracle.close()
        await ledger.close()
        log.warning("SYSTEM_SHUTDOWN_COMPLETE")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
