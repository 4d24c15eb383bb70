from .functions import encode_sqrt_price_x96, exchange_rate_from_sqrt_price_x96
from .liquidity_pool import ConcentratedLiquidityPool
from .position_ledger import PositionLedger, get_position_key
from .settlement import DirectPayer, MintCallback, SwapCallback
from .tick_ledger import TickLedger
from .types import (
    PoolMint,
    PoolSimulationResult,
    PoolState,
    PoolStateUpdated,
    PoolSwap,
    PositionInfo,
    PriceState,
    TickInfo,
)

__all__ = (
    "ConcentratedLiquidityPool",
    "DirectPayer",
    "MintCallback",
    "PoolMint",
    "PoolSimulationResult",
    "PoolState",
    "PoolStateUpdated",
    "PoolSwap",
    "PositionInfo",
    "PositionLedger",
    "PriceState",
    "SwapCallback",
    "TickInfo",
    "TickLedger",
    "encode_sqrt_price_x96",
    "exchange_rate_from_sqrt_price_x96",
    "get_position_key",
)
