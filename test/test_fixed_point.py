import math
from decimal import Decimal

import pytest

from repfees.core import fixed_point as fp


def test_div_truncates_toward_zero():
    assert fp.div(7, 2) == 3
    assert fp.div(-7, 2) == -3
    assert fp.div(7, -2) == -3
    assert fp.div(-7, -2) == 3
    assert fp.div(0, 5) == 0


def test_ceil_div_rounds_up():
    assert fp.ceil_div(500, 90) == 6
    assert fp.ceil_div(540, 90) == 6
    assert fp.ceil_div(0, 90) == 0


def test_sqrt_and_pow():
    assert fp.sqrt(10**36) == 10**18
    assert fp.sqrt(15) == 3
    assert fp.int_pow(10, 18) == 10**18
    with pytest.raises(ValueError):
        fp.int_pow(10, -1)


def test_pow_real_non_finite_results():
    assert fp.pow_real(1.01, 365 / 7) == pytest.approx(1.01 ** (365 / 7))
    assert math.isnan(fp.pow_real(-0.5, 365 / 7))
    assert math.isnan(fp.pow_real(math.nan, 2))
    assert fp.pow_real(1e300, 52.14) == math.inf


def test_div_to_real_small_values():
    assert fp.div_to_real(40, 50) == pytest.approx(0.8)
    assert fp.div_to_real(50, 40) == pytest.approx(1.25)
    assert fp.div_to_real(-40, 50) == pytest.approx(-0.8)
    assert fp.div_to_real(40, -50) == pytest.approx(-0.8)
    assert fp.div_to_real(-40, -50) == pytest.approx(0.8)
    assert fp.div_to_real(0, 50) == 0.0


def test_div_to_real_beyond_float_precision():
    # 2**80 + 1 has no exact float; the quotient must still be accurate
    a = 2**80 + 1
    assert fp.div_to_real(a, 2**79) == pytest.approx(2.0)
    big = 123_456_789 * 10**30 + 987
    assert fp.div_to_real(big, 10**30) == pytest.approx(123_456_789.0)
    assert fp.div_to_real(10**30, big) == pytest.approx(1 / 123_456_789)


def test_div_to_real_by_zero_is_an_error():
    with pytest.raises(ZeroDivisionError):
        fp.div_to_real(1, 0)


def test_mul_real_is_exact_then_truncates():
    assert fp.mul_real(50, 1.0) == 50
    assert fp.mul_real(3 * 10**18, 0.5) == 15 * 10**17
    assert fp.mul_real(10, 0.25) == 2
    with pytest.raises(ValueError):
        fp.mul_real(10, math.inf)


def test_unit_conversions():
    assert fp.to_units("1.5", fp.ETH_DECIMALS) == 15 * 10**17
    assert fp.to_units("20", fp.GWEI_DECIMALS) == 20 * 10**9
    assert fp.to_units("0.0000000000000000019", fp.ETH_DECIMALS) == 1
    assert fp.from_units(15 * 10**17, fp.ETH_DECIMALS) == Decimal("1.5")
    assert fp.parse_units("1000000000000000000") == 10**18
    assert fp.parse_units(42) == 42
    with pytest.raises(ValueError):
        fp.to_units("one", fp.ETH_DECIMALS)
    with pytest.raises(ValueError):
        fp.to_units("Infinity", fp.ETH_DECIMALS)


def test_div_to_real_saturates_beyond_float_range():
    assert fp.div_to_real(10**400, 3) == math.inf
    assert fp.div_to_real(-10**400, 3) == -math.inf
    assert fp.div_to_real(10**400, -3) == -math.inf
    assert fp.div_to_real(3, 10**400) == 0.0


@pytest.mark.parametrize("raw", ["1e3000000", "-1e3000000", "1e80"])
def test_to_units_rejects_out_of_range_amounts(raw):
    with pytest.raises(ValueError):
        fp.to_units(raw, fp.ETH_DECIMALS)
