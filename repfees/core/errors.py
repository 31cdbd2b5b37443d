# /repfees/core/errors.py
"""Error kinds raised by the fee-window readers and oracles.

Every error carries an operation prefix (``"get_window: ..."``) so a
failure that crossed an ``asyncio.gather`` fan-out can still be traced
back to the read that produced it.
"""


class FeeWindowError(Exception):
    """Base class for all errors raised by repfees."""

    def with_context(self, operation: str) -> "FeeWindowError":
        """Returns a copy of this error, same class, prefixed with *operation*."""
        err = type(self)(f"{operation}: {self}")
        err.__cause__ = self
        return err


class NetworkError(FeeWindowError):
    """An oracle or ledger call failed or timed out. Safe to retry."""


class WindowNotOverError(FeeWindowError):
    """A historical read was requested for a fee window that is still open."""


class MalformedResponseError(FeeWindowError):
    """An oracle answered but the payload lacked the expected field."""
