from clamm.constants import MAX_UINT256, MIN_UINT256
from clamm.exceptions import EVMRevertError, InvalidUint256
from clamm.libraries.functions import mulmod


def _check_uint256(*values: int) -> None:
    for value in values:
        if not (MIN_UINT256 <= value <= MAX_UINT256):
            raise InvalidUint256


def muldiv(
    a: int,
    b: int,
    denominator: int,
) -> int:
    """
    Calculate floor(a * b / denominator) with full precision.

    Python integers do not overflow, so the intermediate product needs no special handling. The
    inputs and the result are checked against the uint256 bounds enforced by the Solidity
    library.

    ref: https://github.com/Uniswap/v3-core/blob/main/contracts/libraries/FullMath.sol
    """

    _check_uint256(a, b, denominator)

    if denominator == 0:
        raise EVMRevertError(error="DIVISION BY ZERO")

    result = (a * b) // denominator

    if result > MAX_UINT256:
        raise EVMRevertError(error="Invalid result, does not fit in uint256")

    return result


def muldiv_rounding_up(a: int, b: int, denominator: int) -> int:
    result = muldiv(a, b, denominator)
    if mulmod(a, b, denominator) > 0:
        # must be less than max uint256 since we're rounding up
        if result >= MAX_UINT256:
            raise EVMRevertError(error="muldiv_rounding_up overflow")
        return result + 1
    return result
