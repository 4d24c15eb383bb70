from fractions import Fraction

import pytest

from clamm.exceptions import ClammValueError
from clamm.libraries.tick_math import get_sqrt_ratio_at_tick, get_tick_at_sqrt_ratio
from clamm.pool import encode_sqrt_price_x96, exchange_rate_from_sqrt_price_x96


def test_encode_sqrt_price_x96():
    assert encode_sqrt_price_x96(1, 1) == 2**96
    assert encode_sqrt_price_x96(4, 1) == 2 * 2**96
    assert encode_sqrt_price_x96(1, 4) == 2**95

    # the price at tick 100 is 1.0001^100
    sqrt_price = encode_sqrt_price_x96(10001**100, 10000**100)
    assert get_tick_at_sqrt_ratio(sqrt_price) in (99, 100)
    assert abs(sqrt_price - get_sqrt_ratio_at_tick(100)) < 2**96 // 10**12


@pytest.mark.parametrize(("amount1", "amount0"), [(0, 1), (1, 0), (-1, 1)])
def test_encode_sqrt_price_x96_invalid(amount1: int, amount0: int):
    with pytest.raises(ClammValueError):
        encode_sqrt_price_x96(amount1, amount0)


def test_exchange_rate_from_sqrt_price_x96():
    assert exchange_rate_from_sqrt_price_x96(2**96) == 1
    assert exchange_rate_from_sqrt_price_x96(2 * 2**96) == 4
    assert exchange_rate_from_sqrt_price_x96(2**95) == Fraction(1, 4)
