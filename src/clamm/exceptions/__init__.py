from clamm.exceptions.base import ClammError, ClammTypeError, ClammValueError
from clamm.exceptions.evm import EVMRevertError, InvalidUint256
from clamm.exceptions.liquidity_pool import (
    InsufficientInputAmount,
    InvalidPriceLimit,
    InvalidSwapAmount,
    InvalidTickRange,
    LiquidityOverflow,
    LiquidityPoolError,
    PoolLocked,
    TransferFailed,
    ZeroLiquidity,
)

from . import evm, liquidity_pool

__all__ = (
    "ClammError",
    "ClammTypeError",
    "ClammValueError",
    "EVMRevertError",
    "InsufficientInputAmount",
    "InvalidPriceLimit",
    "InvalidSwapAmount",
    "InvalidTickRange",
    "InvalidUint256",
    "LiquidityOverflow",
    "LiquidityPoolError",
    "PoolLocked",
    "TransferFailed",
    "ZeroLiquidity",
    "evm",
    "liquidity_pool",
)
