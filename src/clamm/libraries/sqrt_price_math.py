import functools

from clamm.constants import MAX_UINT160, MAX_UINT256
from clamm.exceptions import EVMRevertError
from clamm.libraries._config import LIB_CACHE_SIZE
from clamm.libraries.constants import Q96, Q96_RESOLUTION
from clamm.libraries.full_math import muldiv, muldiv_rounding_up
from clamm.libraries.functions import to_int256, to_uint160
from clamm.libraries.unsafe_math import div_rounding_up
from clamm.types.aliases import SqrtPriceX96

"""
ref: https://github.com/Uniswap/v3-core/blob/main/contracts/libraries/SqrtPriceMath.sol
"""


@functools.lru_cache(maxsize=LIB_CACHE_SIZE)
def get_amount0_delta(
    sqrt_ratio_a_x96: SqrtPriceX96,
    sqrt_ratio_b_x96: SqrtPriceX96,
    liquidity: int,
    round_up: bool | None = None,
) -> int:
    """
    Get the token0 amount between two prices for a given liquidity.

    The Solidity function is overloaded. With `round_up` given, `liquidity` is unsigned and the
    unsigned amount is returned. Without it, `liquidity` is a signed delta and the signed amount
    is returned, rounded up for positive deltas and down for negative deltas.
    """

    if round_up is None:
        if liquidity < 0:
            return to_int256(
                -get_amount0_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, -liquidity, False)
            )
        return to_int256(get_amount0_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, True))

    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if sqrt_ratio_a_x96 <= 0:
        raise EVMRevertError(error="required: sqrt_ratio_a_x96 > 0")

    numerator1 = liquidity << Q96_RESOLUTION
    numerator2 = sqrt_ratio_b_x96 - sqrt_ratio_a_x96

    if round_up:
        return div_rounding_up(
            muldiv_rounding_up(numerator1, numerator2, sqrt_ratio_b_x96),
            sqrt_ratio_a_x96,
        )
    return muldiv(numerator1, numerator2, sqrt_ratio_b_x96) // sqrt_ratio_a_x96


@functools.lru_cache(maxsize=LIB_CACHE_SIZE)
def get_amount1_delta(
    sqrt_ratio_a_x96: SqrtPriceX96,
    sqrt_ratio_b_x96: SqrtPriceX96,
    liquidity: int,
    round_up: bool | None = None,
) -> int:
    """
    Get the token1 amount between two prices for a given liquidity. Overloaded in the same way as
    `get_amount0_delta`.
    """

    if round_up is None:
        if liquidity < 0:
            return to_int256(
                -get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, -liquidity, False)
            )
        return to_int256(get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, True))

    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if round_up:
        return muldiv_rounding_up(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)
    return muldiv(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)


def get_next_sqrt_price_from_amount0_rounding_up(
    sqrt_price_x96: SqrtPriceX96,
    liquidity: int,
    amount: int,
    add: bool,
) -> SqrtPriceX96:
    if amount == 0:
        return sqrt_price_x96

    numerator1 = liquidity << Q96_RESOLUTION
    product = amount * sqrt_price_x96

    if add:
        if product < MAX_UINT256:
            denominator = numerator1 + product
            if denominator >= numerator1:
                return muldiv_rounding_up(numerator1, sqrt_price_x96, denominator)
        # the product would overflow a uint256 in Solidity, so use the less precise path
        return div_rounding_up(numerator1, (numerator1 // sqrt_price_x96) + amount)

    if numerator1 <= product:
        raise EVMRevertError(error="required: numerator1 > product")
    return to_uint160(muldiv_rounding_up(numerator1, sqrt_price_x96, numerator1 - product))


def get_next_sqrt_price_from_amount1_rounding_down(
    sqrt_price_x96: SqrtPriceX96,
    liquidity: int,
    amount: int,
    add: bool,
) -> SqrtPriceX96:
    if add:
        quotient = (
            (amount << Q96_RESOLUTION) // liquidity
            if amount <= MAX_UINT160
            else muldiv(amount, Q96, liquidity)
        )
        return to_uint160(sqrt_price_x96 + quotient)

    quotient = (
        div_rounding_up(amount << Q96_RESOLUTION, liquidity)
        if amount <= MAX_UINT160
        else muldiv_rounding_up(amount, Q96, liquidity)
    )

    if sqrt_price_x96 <= quotient:
        raise EVMRevertError(error="required: sqrt_price_x96 > quotient")

    # always fits 160 bits
    return sqrt_price_x96 - quotient


@functools.lru_cache(maxsize=LIB_CACHE_SIZE)
def get_next_sqrt_price_from_input(
    sqrt_price_x96: SqrtPriceX96,
    liquidity: int,
    amount_in: int,
    zero_for_one: bool,
) -> SqrtPriceX96:
    if sqrt_price_x96 <= 0:
        raise EVMRevertError(error="required: sqrt_price_x96 > 0")
    if liquidity <= 0:
        raise EVMRevertError(error="required: liquidity > 0")

    # round to make sure that we don't pass the target price
    if zero_for_one:
        return get_next_sqrt_price_from_amount0_rounding_up(
            sqrt_price_x96, liquidity, amount_in, True
        )
    return get_next_sqrt_price_from_amount1_rounding_down(
        sqrt_price_x96, liquidity, amount_in, True
    )


@functools.lru_cache(maxsize=LIB_CACHE_SIZE)
def get_next_sqrt_price_from_output(
    sqrt_price_x96: SqrtPriceX96,
    liquidity: int,
    amount_out: int,
    zero_for_one: bool,
) -> SqrtPriceX96:
    if sqrt_price_x96 <= 0:
        raise EVMRevertError(error="required: sqrt_price_x96 > 0")
    if liquidity <= 0:
        raise EVMRevertError(error="required: liquidity > 0")

    # round to make sure that we pass the target price
    if zero_for_one:
        return get_next_sqrt_price_from_amount1_rounding_down(
            sqrt_price_x96, liquidity, amount_out, False
        )
    return get_next_sqrt_price_from_amount0_rounding_up(
        sqrt_price_x96, liquidity, amount_out, False
    )
