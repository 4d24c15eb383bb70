import pickle

import pytest

from clamm.exceptions import (
    ClammError,
    ClammValueError,
    EVMRevertError,
    InsufficientInputAmount,
    InvalidPriceLimit,
    InvalidSwapAmount,
    InvalidTickRange,
    InvalidUint256,
    LiquidityOverflow,
    LiquidityPoolError,
    PoolLocked,
    TransferFailed,
    ZeroLiquidity,
)

from ..conftest import BOB, TOKEN0_ADDRESS


@pytest.mark.parametrize(
    "exception",
    [
        ClammValueError(message="Invalid value"),
        EVMRevertError(error="LS"),
        InvalidUint256(),
        InvalidTickRange(200, -200, "lower tick must be below upper tick"),
        ZeroLiquidity(),
        LiquidityOverflow(tick=10, liquidity_gross=2**120, max_liquidity=2**110),
        InsufficientInputAmount(token=TOKEN0_ADDRESS, amount_owed=10, amount_received=9),
        InvalidSwapAmount(),
        InvalidPriceLimit(2**96),
        PoolLocked(),
        TransferFailed(token=TOKEN0_ADDRESS, recipient=BOB, amount=100),
    ],
)
def test_exception_pickling(exception: ClammError) -> None:
    """
    Test that exceptions can be pickled and unpickled with their attributes and message intact.
    """

    unpickled_exception = pickle.loads(pickle.dumps(exception))

    assert type(unpickled_exception) is type(exception)
    assert unpickled_exception.message == exception.message
    assert str(unpickled_exception) == str(exception)
    assert vars(unpickled_exception) == vars(exception)


def test_insufficient_input_amount_attributes() -> None:
    exception = InsufficientInputAmount(token=TOKEN0_ADDRESS, amount_owed=10, amount_received=9)

    assert isinstance(exception, LiquidityPoolError)
    assert isinstance(exception, ClammError)
    assert exception.token == TOKEN0_ADDRESS
    assert exception.amount_owed == 10
    assert exception.amount_received == 9
    assert "owed 10, received 9" in exception.message


def test_evm_revert_error_attributes() -> None:
    exception = EVMRevertError(error="LA")

    assert exception.error == "LA"
    assert exception.message == "EVM Revert: LA"
    assert isinstance(InvalidUint256(), EVMRevertError)
