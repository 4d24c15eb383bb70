import logging

import pytest

from clamm.checksum_cache import get_checksum_address
from clamm.erc20 import Erc20Token
from clamm.logging import logger
from clamm.pool import ConcentratedLiquidityPool, DirectPayer

TOKEN0_ADDRESS = get_checksum_address("0x1000000000000000000000000000000000000001")
TOKEN1_ADDRESS = get_checksum_address("0x2000000000000000000000000000000000000002")
POOL_ADDRESS = get_checksum_address("0x3000000000000000000000000000000000000003")
ALICE = get_checksum_address("0xa11ce00000000000000000000000000000000001")
BOB = get_checksum_address("0xb0b0000000000000000000000000000000000002")

INITIAL_BALANCE = 10**30


@pytest.fixture(scope="session", autouse=True)
def _set_clamm_logging():
    """
    Set the logging level to DEBUG for the test run
    """
    logger.setLevel(logging.DEBUG)


@pytest.fixture
def token0() -> Erc20Token:
    return Erc20Token(
        TOKEN0_ADDRESS,
        symbol="TKA",
        name="Token A",
        balances={ALICE: INITIAL_BALANCE},
        silent=True,
    )


@pytest.fixture
def token1() -> Erc20Token:
    return Erc20Token(
        TOKEN1_ADDRESS,
        symbol="TKB",
        name="Token B",
        balances={ALICE: INITIAL_BALANCE},
        silent=True,
    )


@pytest.fixture
def pool(token0: Erc20Token, token1: Erc20Token) -> ConcentratedLiquidityPool:
    """
    A 0.3% fee pool with a tick spacing of 10, at a 1:1 starting price and with no liquidity
    """
    return ConcentratedLiquidityPool(
        POOL_ADDRESS,
        token0,
        token1,
        sqrt_price_x96=2**96,
        fee=3000,
        tick_spacing=10,
    )


@pytest.fixture
def payer(pool: ConcentratedLiquidityPool) -> DirectPayer:
    return DirectPayer(ALICE, pool)
