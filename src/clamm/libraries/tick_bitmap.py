import functools

from clamm.constants import MAX_UINT8
from clamm.exceptions import ClammValueError
from clamm.libraries.bit_math import least_significant_bit, most_significant_bit
from clamm.types.aliases import Bitmap, Tick, Word

"""
ref: https://github.com/Uniswap/v3-core/blob/main/contracts/libraries/TickBitmap.sol

The bitmap is held as a dense mapping of word positions to 256-bit words. A word that is absent
from the mapping has no initialized ticks.
"""

type TickBitmap = dict[Word, Bitmap]


@functools.cache
def position(compressed_tick: int) -> tuple[Word, int]:
    """
    Computes the position in the tick initialization bitmap for the given compressed tick, i.e.
    a tick already divided by the tick spacing.
    """
    return (
        compressed_tick >> 8,  # word_pos
        compressed_tick % 256,  # bit_pos
    )


def flip_tick(
    tick_bitmap: TickBitmap,
    tick: Tick,
    tick_spacing: int,
) -> None:
    """
    Flip the initialized state for a given tick from false to true, or vice versa.
    """

    if tick % tick_spacing != 0:
        raise ClammValueError(message=f"Tick {tick} not aligned to tick spacing {tick_spacing}")

    word_pos, bit_pos = position(tick // tick_spacing)
    word = tick_bitmap.get(word_pos, 0) ^ (1 << bit_pos)
    if word:
        tick_bitmap[word_pos] = word
    else:
        tick_bitmap.pop(word_pos, None)


def is_initialized(tick_bitmap: TickBitmap, tick: Tick, tick_spacing: int) -> bool:
    word_pos, bit_pos = position(tick // tick_spacing)
    return bool(tick_bitmap.get(word_pos, 0) & (1 << bit_pos))


def next_initialized_tick_within_one_word(
    tick_bitmap: TickBitmap,
    tick: Tick,
    tick_spacing: int,
    less_than_or_equal: bool,
) -> tuple[Tick, bool]:
    """
    Returns the next initialized tick contained in the same word (or adjacent word) as the tick
    that is either to the left (less than or equal to) or right (greater than) of the given tick.

    If no initialized tick is found within the word, the word boundary tick is returned with an
    initialized status of False.
    """

    # Python floor division rounds toward negative infinity, which matches the adjusted
    # compression in the Solidity library
    compressed = tick // tick_spacing

    if less_than_or_equal:
        word_pos, bit_pos = position(compressed)
        # all the 1s at or to the right of the current bit_pos
        mask = (1 << bit_pos) - 1 + (1 << bit_pos)
        masked = tick_bitmap.get(word_pos, 0) & mask

        if masked:
            return (compressed - (bit_pos - most_significant_bit(masked))) * tick_spacing, True
        return (compressed - bit_pos) * tick_spacing, False

    # start from the word of the next tick, since the current tick state doesn't matter
    word_pos, bit_pos = position(compressed + 1)
    # all the 1s at or to the left of the bit_pos
    mask = ~((1 << bit_pos) - 1)
    masked = tick_bitmap.get(word_pos, 0) & mask

    if masked:
        return (compressed + 1 + (least_significant_bit(masked) - bit_pos)) * tick_spacing, True
    return (compressed + 1 + (MAX_UINT8 - bit_pos)) * tick_spacing, False
