# /repfees/core/decorators.py
# Bounded retries for read operations.
from typing import Awaitable, Callable, TypeVar

from tenacity import AsyncRetrying, RetryError, retry_if_exception_type, stop_after_attempt, wait_fixed

from repfees.core.config import settings
from repfees.core.errors import NetworkError
from repfees.core.logger import get_logger, READ_RETRIES

log = get_logger(__name__)

T = TypeVar("T")


def _log_retry(retry_state):
    READ_RETRIES.inc()
    log.warning(
        "READ_RETRY",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()),
    )


async def retry_read(operation: Callable[[], Awaitable[T]],
                     max_attempts: int = settings.RETRY_ATTEMPTS,
                     backoff_s: float = settings.RETRY_BACKOFF_S) -> T:
    """
    Runs ``operation()`` until it succeeds, at most ``max_attempts`` times.

    ``operation`` is a factory: every attempt calls it again so the request is
    re-issued rather than re-awaited. Only NetworkError is retried; anything
    else (an open window, a malformed payload) is raised on the first failure.
    Once the attempts are used up the last failure is raised wrapped in a
    NetworkError.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(backoff_s),
        retry=retry_if_exception_type(NetworkError),
        before_sleep=_log_retry,
    )
    try:
        return await retrying(operation)
    except RetryError as e:
        last = e.last_attempt.exception()
        log.error("READ_RETRIES_EXHAUSTED", attempts=max_attempts, error=str(last))
        raise NetworkError(f"retry: {last}") from last
