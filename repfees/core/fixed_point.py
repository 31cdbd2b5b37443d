# /repfees/core/fixed_point.py
"""Exact integer arithmetic on fixed-point amounts.

Amounts are plain ``int`` values scaled by ``10**decimals`` (wei for ETH,
the smallest REP unit, wei per gas for gas prices). Addition, subtraction
and multiplication are the ordinary integer operators. Division needs a
helper because ``//`` floors while the ledger truncates toward zero.

Ratios (profit per REP, percentages) cannot stay exact, so they go through
``div_to_real`` which keeps the result sane even when the operands are far
beyond the range a float holds exactly.
"""
import math
from decimal import Decimal, DecimalException, localcontext
from fractions import Fraction

ETH_DECIMALS = 18
REP_DECIMALS = 18
GWEI_DECIMALS = 9

# Ledger amounts are uint256, below 10**78
MAX_AMOUNT_DIGITS = 78

# Largest bit length for which every integer is exactly representable as a float
FLOAT_EXACT_BITS = 53


def div(a: int, b: int) -> int:
    """Integer division truncating toward zero, like the EVM's ``DIV``/``SDIV``."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def ceil_div(a: int, b: int) -> int:
    """Integer division rounding toward positive infinity."""
    return -(-a // b)


def int_pow(a: int, exponent: int) -> int:
    if exponent < 0:
        raise ValueError("negative exponent on a fixed-point amount")
    return a ** exponent


def sqrt(a: int) -> int:
    """Exact floor of the square root, the integer rendition of ``a ** 0.5``."""
    return math.isqrt(a)


def pow_real(base: float, exponent: float) -> float:
    """Real power with non-finite results instead of exceptions.

    A negative base with a fractional exponent has no real result and yields
    nan; a result beyond the float range yields inf.
    """
    if math.isnan(base) or base < 0:
        return math.nan
    try:
        return math.pow(base, exponent)
    except OverflowError:
        return math.inf


def mul_real(amount: int, rate: float) -> int:
    """Multiplies an amount by a finite real rate, truncating toward zero.

    Floats are binary fractions, so ``Fraction(rate)`` is exact and the only
    rounding is the final truncation.
    """
    if not math.isfinite(rate):
        raise ValueError(f"cannot scale an amount by non-finite rate {rate}")
    product = amount * Fraction(rate)
    return math.trunc(product)


def div_to_real(a: int, b: int) -> float:
    """Widening division: best-effort ``a / b`` as a float for arbitrarily large ints.

    * ``a < b``: the reciprocal of ``div_to_real(b, a)``
    * ``b < 0``: the negation of ``div_to_real(a, -b)``
    * ``a`` wider than 53 bits: the exact integer quotient plus the real
      quotient of the remainder
    * otherwise the ordinary float quotient

    Quotients beyond the float range come back as signed infinity.
    """
    if b == 0:
        raise ZeroDivisionError("div_to_real by zero")
    if a == 0:
        return 0.0
    if a < b:
        inverse = div_to_real(b, a)
        if inverse == 0:
            return math.copysign(math.inf, inverse)
        return 1 / inverse
    if b < 0:
        return -div_to_real(a, -b)
    if a.bit_length() > FLOAT_EXACT_BITS:
        quotient, remainder = divmod(a, b)
        try:
            return float(quotient) + div_to_real(remainder, b)
        except OverflowError:
            return math.inf
    return a / b


def parse_units(raw) -> int:
    """Parses a ledger integer (decimal string or int) in the asset's smallest unit."""
    if isinstance(raw, bool):
        raise TypeError("boolean is not a ledger amount")
    if isinstance(raw, int):
        return raw
    return int(str(raw).strip(), 10)


def to_units(value, decimals: int) -> int:
    """Converts a human decimal (``"1.5"`` ETH) into a scaled int, truncating extra digits."""
    with localcontext() as ctx:
        ctx.prec = 100
        try:
            scaled = Decimal(str(value).strip()).scaleb(decimals)
        except DecimalException as e:
            raise ValueError(f"not a decimal amount: {value!r}") from e
    if not scaled.is_finite():
        raise ValueError(f"not a finite amount: {value!r}")
    if scaled and scaled.adjusted() >= MAX_AMOUNT_DIGITS:
        raise ValueError(f"amount out of range: {value!r}")
    return int(scaled)


def from_units(amount: int, decimals: int) -> Decimal:
    """Converts a scaled int back to an exact ``Decimal`` for display."""
    with localcontext() as ctx:
        ctx.prec = 100
        return Decimal(amount).scaleb(-decimals)
