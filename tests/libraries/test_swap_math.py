from decimal import Decimal, getcontext

import pytest

from clamm.libraries.sqrt_price_math import (
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)
from clamm.libraries.swap_math import compute_swap_step

# Tests adapted from Typescript tests on Uniswap V3 Github repo
# ref: https://github.com/Uniswap/v3-core/blob/main/test/SwapMath.spec.ts

getcontext().prec = 256
getcontext().rounding = "ROUND_FLOOR"


def expand_to_18_decimals(x: int) -> int:
    return x * 10**18


def encode_price_sqrt(reserve1: int, reserve0: int) -> int:
    return round((Decimal(reserve1) / Decimal(reserve0)).sqrt() * Decimal(2**96))


PRICE_1_1 = encode_price_sqrt(1, 1)
FEE = 600
LIQUIDITY = expand_to_18_decimals(2)


def test_exact_input_capped_at_price_target_one_for_zero():
    price_target = encode_price_sqrt(101, 100)
    amount = expand_to_18_decimals(1)

    sqrt_q, amount_in, amount_out, fee_amount = compute_swap_step(
        PRICE_1_1, price_target, LIQUIDITY, amount, FEE
    )

    assert amount_in == 9975124224178055
    assert fee_amount == 5988667735148
    assert amount_out == 9925619580021728
    assert amount_in + fee_amount < amount
    assert sqrt_q == price_target
    assert sqrt_q < get_next_sqrt_price_from_input(PRICE_1_1, LIQUIDITY, amount, False)


def test_exact_output_capped_at_price_target_one_for_zero():
    price_target = encode_price_sqrt(101, 100)
    amount = -expand_to_18_decimals(1)

    sqrt_q, amount_in, amount_out, fee_amount = compute_swap_step(
        PRICE_1_1, price_target, LIQUIDITY, amount, FEE
    )

    assert amount_in == 9975124224178055
    assert fee_amount == 5988667735148
    assert amount_out == 9925619580021728
    assert amount_out < -amount
    assert sqrt_q == price_target
    assert sqrt_q < get_next_sqrt_price_from_output(PRICE_1_1, LIQUIDITY, -amount, False)


def test_exact_input_fully_spent_one_for_zero():
    price_target = encode_price_sqrt(1000, 100)
    amount = expand_to_18_decimals(1)

    sqrt_q, amount_in, amount_out, fee_amount = compute_swap_step(
        PRICE_1_1, price_target, LIQUIDITY, amount, FEE
    )

    assert amount_in == 999400000000000000
    assert fee_amount == 600000000000000
    assert amount_out == 666399946655997866
    assert amount_in + fee_amount == amount
    assert sqrt_q < price_target
    assert sqrt_q == get_next_sqrt_price_from_input(
        PRICE_1_1, LIQUIDITY, amount - fee_amount, False
    )


def test_exact_output_fully_received_one_for_zero():
    price_target = encode_price_sqrt(10000, 100)
    amount = -expand_to_18_decimals(1)

    sqrt_q, amount_in, amount_out, fee_amount = compute_swap_step(
        PRICE_1_1, price_target, LIQUIDITY, amount, FEE
    )

    assert amount_in == 2000000000000000000
    assert fee_amount == 1200720432259356
    assert amount_out == -amount
    assert sqrt_q < price_target
    assert sqrt_q == get_next_sqrt_price_from_output(PRICE_1_1, LIQUIDITY, -amount, False)


def test_amount_out_is_capped_at_desired_amount_out():
    sqrt_q, amount_in, amount_out, fee_amount = compute_swap_step(
        417332158212080721273783715441582,
        1452870262520218020823638996,
        159344665391607089467575320103,
        -1,
        1,
    )

    assert amount_in == 1
    assert fee_amount == 1
    assert amount_out == 1  # would be 2 if not capped
    assert sqrt_q == 417332158212080721273783715441581


def test_target_price_of_one_uses_partial_input_amount():
    sqrt_q, amount_in, amount_out, fee_amount = compute_swap_step(
        2,
        1,
        1,
        3915081100057732413702495386755767,
        1,
    )
    assert amount_in == 39614081257132168796771975168
    assert fee_amount == 39614120871253040049813
    assert amount_in + fee_amount <= 3915081100057732413702495386755767
    assert amount_out == 0
    assert sqrt_q == 1


def test_entire_input_amount_taken_as_fee():
    sqrt_q, amount_in, amount_out, fee_amount = compute_swap_step(
        2413,
        79887613182836312,
        1985041575832132834610021537970,
        10,
        1872,
    )
    assert amount_in == 0
    assert fee_amount == 10
    assert amount_out == 0
    assert sqrt_q == 2413


@pytest.mark.parametrize(
    ("target_ratio", "amount_remaining", "expected"),
    [
        # virtual reserves of token0 are only 4
        ((11, 10), -4, (0, 26215, 79)),
        # virtual reserves of token1 are only 262144
        ((9, 10), -263000, (26214, 1, 1)),
    ],
)
def test_intermediate_insufficient_liquidity_exact_output(
    target_ratio: tuple[int, int],
    amount_remaining: int,
    expected: tuple[int, int, int],
):
    sqrt_p = 20282409603651670423947251286016
    numerator, denominator = target_ratio
    sqrt_p_target = sqrt_p * numerator // denominator

    sqrt_q, amount_in, amount_out, fee_amount = compute_swap_step(
        sqrt_p, sqrt_p_target, 1024, amount_remaining, 3000
    )

    assert sqrt_q == sqrt_p_target
    assert (amount_out, amount_in, fee_amount) == expected


def test_zero_liquidity_moves_to_target():
    price_target = encode_price_sqrt(101, 100)

    sqrt_q, amount_in, amount_out, fee_amount = compute_swap_step(
        PRICE_1_1, price_target, 0, expand_to_18_decimals(1), FEE
    )

    assert sqrt_q == price_target
    assert amount_in == amount_out == fee_amount == 0
