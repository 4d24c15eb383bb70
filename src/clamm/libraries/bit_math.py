from clamm.constants import MAX_UINT256, MIN_UINT256
from clamm.exceptions import EVMRevertError

# Adapted from the Uniswap V3 BitMath.sol library.
# Reference: https://github.com/Uniswap/v3-core/blob/main/contracts/libraries/BitMath.sol


def _check_bounds(number: int) -> None:
    if number <= MIN_UINT256:
        raise EVMRevertError(error="required: number > 0")
    if number > MAX_UINT256:
        raise EVMRevertError(error="required: number <= max(uint256)")


def least_significant_bit(number: int) -> int:
    """
    Find the index of the least significant set bit.

    Isolates the lowest set bit with two's complement masking instead of the binary search in the
    Solidity library.
    """

    _check_bounds(number)
    return (number & -number).bit_length() - 1


def most_significant_bit(number: int) -> int:
    """
    Find the index of the most significant set bit.
    """

    _check_bounds(number)
    return number.bit_length() - 1
