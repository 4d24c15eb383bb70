from clamm.constants import MAX_UINT128
from clamm.libraries.functions import evm_divide
from clamm.libraries.tick_math import MAX_TICK, MIN_TICK


def tick_spacing_to_max_liquidity_per_tick(tick_spacing: int) -> int:
    """
    The maximum gross liquidity that may reference a single tick, chosen so that the sum over all
    usable ticks cannot overflow a uint128.
    """

    min_tick = evm_divide(MIN_TICK, tick_spacing) * tick_spacing
    max_tick = evm_divide(MAX_TICK, tick_spacing) * tick_spacing
    num_ticks = (max_tick - min_tick) // tick_spacing + 1
    return MAX_UINT128 // num_ticks
