from .checksum_cache import get_checksum_address
from .config import settings
from .version import __version__

# isort: split

from .erc20 import Erc20Token
from .logging import logger
from .pool import (
    ConcentratedLiquidityPool,
    DirectPayer,
    PoolMint,
    PoolSimulationResult,
    PoolState,
    PoolStateUpdated,
    PoolSwap,
    PositionInfo,
    PositionLedger,
    PriceState,
    TickInfo,
    TickLedger,
)

# isort: split

from . import constants, erc20, exceptions, libraries, pool

__all__ = (
    "ConcentratedLiquidityPool",
    "DirectPayer",
    "Erc20Token",
    "PoolMint",
    "PoolSimulationResult",
    "PoolState",
    "PoolStateUpdated",
    "PoolSwap",
    "PositionInfo",
    "PositionLedger",
    "PriceState",
    "TickInfo",
    "TickLedger",
    "__version__",
    "constants",
    "erc20",
    "exceptions",
    "get_checksum_address",
    "libraries",
    "logger",
    "pool",
    "settings",
)
