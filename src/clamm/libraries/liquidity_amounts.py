from clamm.libraries.sqrt_price_math import get_amount0_delta, get_amount1_delta
from clamm.libraries.tick_math import get_sqrt_ratio_at_tick
from clamm.types.aliases import SqrtPriceX96, Tick

type Amount0 = int
type Amount1 = int


def get_amounts_for_liquidity_delta(
    sqrt_price_x96: SqrtPriceX96,
    tick: Tick,
    tick_lower: Tick,
    tick_upper: Tick,
    liquidity_delta: int,
) -> tuple[Amount0, Amount1]:
    """
    Calculate the token amounts represented by a liquidity delta over the range
    [tick_lower, tick_upper), given the current price and tick.

    If the current tick is below the range, the position is held entirely in token0 and only
    token0 is returned. If it is at or above the upper tick, only token1 is returned. Inside the
    range, token0 covers the current price up to the upper bound and token1 covers the lower bound
    up to the current price.

    Positive deltas (liquidity added) round up, negative deltas round down. The amounts carry the
    sign of the delta.

    ref: https://github.com/Uniswap/v3-core/blob/main/contracts/UniswapV3Pool.sol (_modifyPosition)
    """

    sqrt_price_lower = get_sqrt_ratio_at_tick(tick_lower)
    sqrt_price_upper = get_sqrt_ratio_at_tick(tick_upper)

    if tick < tick_lower:
        return get_amount0_delta(sqrt_price_lower, sqrt_price_upper, liquidity_delta), 0

    if tick < tick_upper:
        return (
            get_amount0_delta(sqrt_price_x96, sqrt_price_upper, liquidity_delta),
            get_amount1_delta(sqrt_price_lower, sqrt_price_x96, liquidity_delta),
        )

    return 0, get_amount1_delta(sqrt_price_lower, sqrt_price_upper, liquidity_delta)
