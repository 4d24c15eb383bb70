from collections.abc import Iterator, Mapping
from typing import Self

from clamm.exceptions import LiquidityOverflow
from clamm.libraries.liquidity_math import add_delta
from clamm.libraries.tick import tick_spacing_to_max_liquidity_per_tick
from clamm.libraries.tick_bitmap import (
    TickBitmap,
    flip_tick,
    next_initialized_tick_within_one_word,
)
from clamm.libraries.tick_math import MAX_TICK, MIN_TICK
from clamm.pool.types import TickInfo
from clamm.types.aliases import LiquidityNet, Tick


class TickLedger:
    """
    Tracks the liquidity referencing each initialized tick, and the bitmap of initialized ticks
    used to find the next tick along a swap path.

    A tick with zero gross liquidity is absent from the ledger.

    ref: https://github.com/Uniswap/v3-core/blob/main/contracts/libraries/Tick.sol
    """

    def __init__(
        self,
        tick_spacing: int,
        tick_data: Mapping[Tick, TickInfo] | None = None,
        tick_bitmap: TickBitmap | None = None,
    ) -> None:
        self.tick_spacing = tick_spacing
        self.max_liquidity_per_tick = tick_spacing_to_max_liquidity_per_tick(tick_spacing)
        self._ticks: dict[Tick, TickInfo] = dict(tick_data) if tick_data is not None else {}
        self._bitmap: TickBitmap = dict(tick_bitmap) if tick_bitmap is not None else {}

        if tick_bitmap is None:
            for tick in self._ticks:
                flip_tick(self._bitmap, tick, tick_spacing)

    def __contains__(self, tick: object) -> bool:
        return tick in self._ticks

    def __iter__(self) -> Iterator[Tick]:
        return iter(sorted(self._ticks))

    def __len__(self) -> int:
        return len(self._ticks)

    def copy(self) -> Self:
        """
        Return an independent ledger holding the same records. Records are immutable, so a shallow
        copy of the mappings is sufficient.
        """

        return self.__class__(
            tick_spacing=self.tick_spacing,
            tick_data=self._ticks,
            tick_bitmap=self._bitmap,
        )

    @property
    def tick_bitmap(self) -> TickBitmap:
        return self._bitmap.copy()

    @property
    def tick_data(self) -> dict[Tick, TickInfo]:
        return self._ticks.copy()

    def get(self, tick: Tick) -> TickInfo:
        """
        Get the record for a tick. An uninitialized tick returns an empty record.
        """

        return self._ticks.get(tick, TickInfo())

    def update(self, tick: Tick, liquidity_delta: int, *, upper: bool = False) -> bool:
        """
        Apply a liquidity delta to the tick, which is the lower boundary of a position unless
        `upper` is set. Gross liquidity changes by the delta at both boundaries. Net liquidity
        changes by the delta at a lower boundary, and by its negation at an upper boundary.

        Returns True if the tick flipped between uninitialized and initialized.
        """

        assert MIN_TICK <= tick <= MAX_TICK, f"Tick {tick} out of bounds"
        assert tick % self.tick_spacing == 0, f"Tick {tick} not aligned to spacing"

        info = self.get(tick)

        liquidity_gross_after = add_delta(info.liquidity_gross, liquidity_delta)
        if liquidity_gross_after > self.max_liquidity_per_tick:
            raise LiquidityOverflow(
                tick=tick,
                liquidity_gross=liquidity_gross_after,
                max_liquidity=self.max_liquidity_per_tick,
            )

        flipped = (liquidity_gross_after == 0) != (info.liquidity_gross == 0)
        if flipped:
            flip_tick(self._bitmap, tick, self.tick_spacing)

        if liquidity_gross_after == 0:
            del self._ticks[tick]
        else:
            self._ticks[tick] = TickInfo(
                liquidity_gross=liquidity_gross_after,
                liquidity_net=(
                    info.liquidity_net - liquidity_delta
                    if upper
                    else info.liquidity_net + liquidity_delta
                ),
            )

        return flipped

    def cross(self, tick: Tick) -> LiquidityNet:
        """
        Get the net liquidity to apply when the price crosses this tick moving up.
        """

        return self.get(tick).liquidity_net

    def next_initialized_tick(self, tick: Tick, less_than_or_equal: bool) -> tuple[Tick, bool]:
        """
        Find the next initialized tick within one bitmap word, clamped to the valid tick range.
        """

        tick_next, initialized = next_initialized_tick_within_one_word(
            tick_bitmap=self._bitmap,
            tick=tick,
            tick_spacing=self.tick_spacing,
            less_than_or_equal=less_than_or_equal,
        )

        # The bitmap is not aware of the min/max tick bounds
        return (
            max(MIN_TICK, tick_next) if less_than_or_equal else min(MAX_TICK, tick_next)
        ), initialized
