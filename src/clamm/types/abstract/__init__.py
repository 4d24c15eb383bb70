from .erc20_token import AbstractErc20Token
from .liquidity_pool import AbstractLiquidityPool
from .pool_state import AbstractPoolState


class AbstractSimulationResult: ...


__all__ = (
    "AbstractErc20Token",
    "AbstractLiquidityPool",
    "AbstractPoolState",
    "AbstractSimulationResult",
)
