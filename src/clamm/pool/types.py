import dataclasses

import pydantic
from eth_typing import ChecksumAddress
from hexbytes import HexBytes

from clamm.libraries.tick_math import MAX_TICK, MIN_TICK, get_sqrt_ratio_at_tick
from clamm.types.abstract import AbstractPoolState, AbstractSimulationResult
from clamm.types.aliases import Bitmap, Liquidity, SqrtPriceX96, Tick, Word
from clamm.types.concrete import PoolEventMessage, PoolStateMessage
from clamm.validation.evm_values import (
    ValidatedInt128,
    ValidatedUint128,
    ValidatedUint256,
)

type PositionKey = HexBytes


class TickInfo(pydantic.BaseModel, frozen=True):
    """
    Liquidity referencing a tick. `liquidity_net` is applied to the active liquidity when the
    price crosses the tick moving up, and subtracted when crossing down.
    """

    liquidity_gross: ValidatedUint128 = 0
    liquidity_net: ValidatedInt128 = 0


class PositionInfo(pydantic.BaseModel, frozen=True):
    """
    A liquidity position. The fee growth and tokens owed fields are carried for accounting, but
    are not modified by the pool operations.
    """

    liquidity: ValidatedUint128 = 0
    fee_growth_inside0_last_x128: ValidatedUint256 = 0
    fee_growth_inside1_last_x128: ValidatedUint256 = 0
    tokens_owed0: ValidatedUint128 = 0
    tokens_owed1: ValidatedUint128 = 0


@dataclasses.dataclass(slots=True, frozen=True)
class PriceState:
    """
    The current square root price and the tick whose range contains it.
    """

    sqrt_price_x96: SqrtPriceX96
    tick: Tick

    def __post_init__(self) -> None:
        assert MIN_TICK <= self.tick <= MAX_TICK, f"Tick {self.tick} out of bounds"
        # A price resting exactly on a tick boundary after a downward swap belongs to the tick
        # below, so both ends of the range are inclusive
        assert get_sqrt_ratio_at_tick(self.tick) <= self.sqrt_price_x96, (
            f"Price {self.sqrt_price_x96} below tick {self.tick}"
        )
        assert (
            self.tick == MAX_TICK or self.sqrt_price_x96 <= get_sqrt_ratio_at_tick(self.tick + 1)
        ), f"Price {self.sqrt_price_x96} above tick {self.tick}"


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class PoolState(AbstractPoolState):
    liquidity: Liquidity
    sqrt_price_x96: SqrtPriceX96
    tick: Tick
    tick_bitmap: dict[Word, Bitmap]
    tick_data: dict[Tick, TickInfo]
    positions: dict[PositionKey, PositionInfo]

    @property
    def price_state(self) -> PriceState:
        return PriceState(sqrt_price_x96=self.sqrt_price_x96, tick=self.tick)


@dataclasses.dataclass(slots=True, frozen=True)
class PoolSimulationResult(AbstractSimulationResult):
    amount0_delta: int
    amount1_delta: int
    initial_state: PoolState
    final_state: PoolState


@dataclasses.dataclass(slots=True, frozen=True)
class PoolStateUpdated(PoolStateMessage):
    state: PoolState


@dataclasses.dataclass(slots=True, frozen=True)
class PoolMint(PoolEventMessage):
    sender: ChecksumAddress
    owner: ChecksumAddress
    tick_lower: Tick
    tick_upper: Tick
    amount: Liquidity
    amount0: int
    amount1: int


@dataclasses.dataclass(slots=True, frozen=True)
class PoolSwap(PoolEventMessage):
    sender: ChecksumAddress
    recipient: ChecksumAddress
    amount0: int
    amount1: int
    sqrt_price_x96: SqrtPriceX96
    liquidity: Liquidity
    tick: Tick
