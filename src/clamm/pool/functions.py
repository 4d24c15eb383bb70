import math
from fractions import Fraction

from clamm.exceptions import ClammValueError
from clamm.types.aliases import SqrtPriceX96


def exchange_rate_from_sqrt_price_x96(sqrt_price_x96: SqrtPriceX96) -> Fraction:
    # ref: https://blog.uniswap.org/uniswap-v3-math-primer
    return Fraction(sqrt_price_x96**2, 2**192)


def encode_sqrt_price_x96(amount1: int, amount0: int) -> SqrtPriceX96:
    """
    Encode the price ratio amount1/amount0 as a Q64.96 square root price, rounded down.

    ref: https://github.com/Uniswap/v3-sdk/blob/main/src/utils/encodeSqrtRatioX96.ts
    """

    if amount0 <= 0 or amount1 <= 0:
        raise ClammValueError(message="Both amounts must be positive.")

    return math.isqrt((amount1 << 192) // amount0)
