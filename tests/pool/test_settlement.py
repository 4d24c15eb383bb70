from clamm.erc20 import Erc20Token
from clamm.pool import ConcentratedLiquidityPool, DirectPayer

from ..conftest import ALICE, INITIAL_BALANCE, POOL_ADDRESS


def test_direct_payer_pays_positive_amounts(
    pool: ConcentratedLiquidityPool, token0: Erc20Token, token1: Erc20Token
):
    payer = DirectPayer(ALICE.lower(), pool)
    assert payer.address == ALICE

    payer.on_mint_settle(100, 0, b"")
    assert token0.balance_of(POOL_ADDRESS) == 100
    assert token1.balance_of(POOL_ADDRESS) == 0

    # negative swap deltas are paid by the pool, not the payer
    payer.on_swap_settle(-50, 25, b"")
    assert token0.balance_of(POOL_ADDRESS) == 100
    assert token1.balance_of(POOL_ADDRESS) == 25
    assert token0.balance_of(ALICE) == INITIAL_BALANCE - 100
    assert token1.balance_of(ALICE) == INITIAL_BALANCE - 25


def test_direct_payer_with_insufficient_balance(
    pool: ConcentratedLiquidityPool, token0: Erc20Token
):
    payer = DirectPayer("0x9999999999999999999999999999999999999999", pool)

    # the rejected transfer is left for the pool's balance check to catch
    payer.on_mint_settle(100, 100, b"")
    assert token0.balance_of(POOL_ADDRESS) == 0
