import pytest

from clamm.pool import ConcentratedLiquidityPool, DirectPayer, PoolState

from ..conftest import ALICE


class SettlementAborted(Exception): ...


class ShortPayer(DirectPayer):
    """
    Pays every owed amount of token1 less `shortfall`, and token0 in full.
    """

    def __init__(self, address: str, pool: ConcentratedLiquidityPool, shortfall: int = 1) -> None:
        super().__init__(address, pool)
        self.shortfall = shortfall

    def on_mint_settle(self, amount0_owed: int, amount1_owed: int, data: bytes) -> None:
        self._pay(self.pool.token0, amount0_owed)
        self._pay(self.pool.token1, amount1_owed - self.shortfall)

    def on_swap_settle(self, amount0_delta: int, amount1_delta: int, data: bytes) -> None:
        self._pay(self.pool.token0, amount0_delta - self.shortfall)
        self._pay(self.pool.token1, amount1_delta - self.shortfall)


class NoPayer(DirectPayer):
    def on_mint_settle(self, amount0_owed: int, amount1_owed: int, data: bytes) -> None:
        pass

    def on_swap_settle(self, amount0_delta: int, amount1_delta: int, data: bytes) -> None:
        pass


class RaisingPayer(DirectPayer):
    def on_mint_settle(self, amount0_owed: int, amount1_owed: int, data: bytes) -> None:
        raise SettlementAborted

    def on_swap_settle(self, amount0_delta: int, amount1_delta: int, data: bytes) -> None:
        raise SettlementAborted


class ReentrantPayer(DirectPayer):
    """
    Pays in full after attempting a second mint on the pool from inside the callback. The
    exception raised by the nested call is re-raised unless `swallow` is set. The pool state seen
    from inside the callback is recorded.
    """

    def __init__(self, address: str, pool: ConcentratedLiquidityPool, swallow: bool = False) -> None:
        super().__init__(address, pool)
        self.swallow = swallow
        self.observed_states: list[PoolState] = []
        self.observed_errors: list[Exception] = []

    def _reenter(self) -> None:
        self.observed_states.append(self.pool.state)
        try:
            self.pool.mint(self.address, -100, 100, 1, DirectPayer(self.address, self.pool))
        except Exception as exc:
            self.observed_errors.append(exc)
            if not self.swallow:
                raise

    def on_mint_settle(self, amount0_owed: int, amount1_owed: int, data: bytes) -> None:
        self._reenter()
        super().on_mint_settle(amount0_owed, amount1_owed, data)

    def on_swap_settle(self, amount0_delta: int, amount1_delta: int, data: bytes) -> None:
        self._reenter()
        super().on_swap_settle(amount0_delta, amount1_delta, data)


@pytest.fixture
def short_payer(pool: ConcentratedLiquidityPool) -> ShortPayer:
    return ShortPayer(ALICE, pool)


@pytest.fixture
def no_payer(pool: ConcentratedLiquidityPool) -> NoPayer:
    return NoPayer(ALICE, pool)


@pytest.fixture
def raising_payer(pool: ConcentratedLiquidityPool) -> RaisingPayer:
    return RaisingPayer(ALICE, pool)


@pytest.fixture
def reentrant_payer(pool: ConcentratedLiquidityPool) -> ReentrantPayer:
    return ReentrantPayer(ALICE, pool)
