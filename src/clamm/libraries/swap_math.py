from clamm.libraries.constants import FEE_DENOMINATOR
from clamm.libraries.full_math import muldiv, muldiv_rounding_up
from clamm.libraries.sqrt_price_math import (
    get_amount0_delta,
    get_amount1_delta,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)
from clamm.types.aliases import Pip, SqrtPriceX96

type AmountIn = int
type AmountOut = int
type FeeTaken = int

"""
ref: https://github.com/Uniswap/v3-core/blob/main/contracts/libraries/SwapMath.sol
"""


def _amount_in(
    sqrt_price_a: SqrtPriceX96, sqrt_price_b: SqrtPriceX96, liquidity: int, zero_for_one: bool
) -> int:
    # input amounts always round up
    if zero_for_one:
        return get_amount0_delta(sqrt_price_a, sqrt_price_b, liquidity, True)
    return get_amount1_delta(sqrt_price_a, sqrt_price_b, liquidity, True)


def _amount_out(
    sqrt_price_a: SqrtPriceX96, sqrt_price_b: SqrtPriceX96, liquidity: int, zero_for_one: bool
) -> int:
    # output amounts always round down
    if zero_for_one:
        return get_amount1_delta(sqrt_price_a, sqrt_price_b, liquidity, False)
    return get_amount0_delta(sqrt_price_a, sqrt_price_b, liquidity, False)


def compute_swap_step(
    sqrt_ratio_x96_current: SqrtPriceX96,
    sqrt_ratio_x96_target: SqrtPriceX96,
    liquidity: int,
    amount_remaining: int,
    fee_pips: Pip,
) -> tuple[SqrtPriceX96, AmountIn, AmountOut, FeeTaken]:
    """
    Compute the result of swapping some amount in or out, given the parameters of the swap.

    A positive `amount_remaining` is an exact input, a negative value is an exact output. The
    resulting price will not pass the target price.

    Returns a tuple (sqrt_ratio_x96_next, amount_in, amount_out, fee_amount)
    """

    assert liquidity >= 0

    zero_for_one = sqrt_ratio_x96_current >= sqrt_ratio_x96_target
    exact_in = amount_remaining >= 0

    if exact_in:
        amount_remaining_less_fee = muldiv(
            amount_remaining, FEE_DENOMINATOR - fee_pips, FEE_DENOMINATOR
        )
        amount_in = _amount_in(
            sqrt_ratio_x96_target, sqrt_ratio_x96_current, liquidity, zero_for_one
        )
        sqrt_ratio_x96_next = (
            sqrt_ratio_x96_target
            if amount_remaining_less_fee >= amount_in
            else get_next_sqrt_price_from_input(
                sqrt_ratio_x96_current, liquidity, amount_remaining_less_fee, zero_for_one
            )
        )
    else:
        amount_out = _amount_out(
            sqrt_ratio_x96_target, sqrt_ratio_x96_current, liquidity, zero_for_one
        )
        sqrt_ratio_x96_next = (
            sqrt_ratio_x96_target
            if -amount_remaining >= amount_out
            else get_next_sqrt_price_from_output(
                sqrt_ratio_x96_current, liquidity, -amount_remaining, zero_for_one
            )
        )

    reached_target = sqrt_ratio_x96_target == sqrt_ratio_x96_next

    # get the input/output amounts, reusing the values above when the whole range was consumed
    if not (reached_target and exact_in):
        amount_in = _amount_in(
            sqrt_ratio_x96_next, sqrt_ratio_x96_current, liquidity, zero_for_one
        )
    if not (reached_target and not exact_in):
        amount_out = _amount_out(
            sqrt_ratio_x96_next, sqrt_ratio_x96_current, liquidity, zero_for_one
        )

    # cap the output amount to not exceed the remaining output amount
    if not exact_in and amount_out > -amount_remaining:
        amount_out = -amount_remaining

    if exact_in and not reached_target:
        # the target was not reached, so the remainder of the maximum input is taken as fee
        fee_amount = amount_remaining - amount_in
    else:
        fee_amount = muldiv_rounding_up(amount_in, fee_pips, FEE_DENOMINATOR - fee_pips)

    return sqrt_ratio_x96_next, amount_in, amount_out, fee_amount
