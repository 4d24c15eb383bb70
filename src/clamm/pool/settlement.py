from typing import TYPE_CHECKING, Protocol

from eth_typing import ChecksumAddress

from clamm.checksum_cache import get_checksum_address
from clamm.logging import logger
from clamm.types.abstract import AbstractErc20Token

if TYPE_CHECKING:
    from clamm.pool.liquidity_pool import ConcentratedLiquidityPool


class MintCallback(Protocol):
    """
    The caller of `mint`. The pool calls `on_mint_settle` after recording the new liquidity, and
    the callee must transfer at least the owed amounts to the pool before returning.
    """

    address: ChecksumAddress

    def on_mint_settle(self, amount0_owed: int, amount1_owed: int, data: bytes) -> None: ...


class SwapCallback(Protocol):
    """
    The caller of `swap`. The pool calls `on_swap_settle` after paying out the output token, and
    the callee must transfer at least the positive delta to the pool before returning.
    """

    address: ChecksumAddress

    def on_swap_settle(self, amount0_delta: int, amount1_delta: int, data: bytes) -> None: ...


class DirectPayer:
    """
    Settles mints and swaps for a single pool by transferring exactly the amounts owed from its
    own balance. Satisfies both the `MintCallback` and `SwapCallback` protocols.
    """

    def __init__(self, address: str, pool: "ConcentratedLiquidityPool") -> None:
        self.address = get_checksum_address(address)
        self.pool = pool

    def _pay(self, token: AbstractErc20Token, amount: int) -> None:
        if amount <= 0:
            return
        logger.debug(f"{self.address} paying {amount} {token} to {self.pool.address}")
        # A rejected transfer is caught by the pool's balance check
        token.transfer(sender=self.address, recipient=self.pool.address, amount=amount)

    def on_mint_settle(self, amount0_owed: int, amount1_owed: int, data: bytes) -> None:
        self._pay(self.pool.token0, amount0_owed)
        self._pay(self.pool.token1, amount1_owed)

    def on_swap_settle(self, amount0_delta: int, amount1_delta: int, data: bytes) -> None:
        self._pay(self.pool.token0, amount0_delta)
        self._pay(self.pool.token1, amount1_delta)
