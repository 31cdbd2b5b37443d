# /repfees/core/logger.py
import logging
import structlog
from structlog.contextvars import bind_contextvars
import sentry_sdk
from prometheus_client import Counter
from repfees.core.config import settings

# --- Prometheus Metrics ---
LEDGER_READS = Counter("repfees_ledger_reads_total", "Total number of ledger reads issued", ["method"])
ORACLE_REQUESTS = Counter("repfees_oracle_requests_total", "Total number of price oracle requests", ["source"])
BLOCK_SEARCH_PROBES = Counter("repfees_block_search_probes_total", "Blocks fetched while resolving a timestamp")
READ_RETRIES = Counter("repfees_read_retries_total", "Read operations retried after a network failure")
ERRORS_LOGGED = Counter("repfees_errors_logged_total", "Total number of errors logged", ["level"])


def count_errors(logger, method_name: str, event_dict: dict) -> dict:
    """Structlog processor feeding ``ERRORS_LOGGED`` for error and critical events."""
    if method_name in ("error", "critical", "exception"):
        ERRORS_LOGGED.labels(method_name).inc()
    return event_dict


def configure_logging():
    if settings.SENTRY_DSN:
        sentry_sdk.init(dsn=settings.SENTRY_DSN.get_secret_value(), traces_sample_rate=1.0)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            count_errors,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(settings.LOG_LEVEL)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str):
    return structlog.get_logger(name)


def bind_request(request_id: str):
    bind_contextvars(request_id=request_id)


configure_logging()
log = get_logger("repfees.System")
