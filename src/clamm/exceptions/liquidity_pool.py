from typing import Any

from eth_typing import ChecksumAddress

from clamm.exceptions.base import ClammError


class LiquidityPoolError(ClammError):
    """
    Exception raised inside liquidity pool helpers.
    """


# 2nd level exceptions for Liquidity Pool classes
class InvalidTickRange(LiquidityPoolError):
    """
    Raised when a tick pair is malformed, out of bounds, or not aligned to the tick spacing.
    """

    def __init__(self, tick_lower: int, tick_upper: int, reason: str) -> None:
        self.tick_lower = tick_lower
        self.tick_upper = tick_upper
        self.reason = reason
        super().__init__(message=f"Invalid tick range [{tick_lower}, {tick_upper}): {reason}")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.tick_lower, self.tick_upper, self.reason)


class ZeroLiquidity(LiquidityPoolError):
    def __init__(self) -> None:
        """
        Raised when a mint would add zero liquidity.
        """

        super().__init__(message="Liquidity amount must be greater than zero.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, ()


class LiquidityOverflow(LiquidityPoolError):
    """
    Raised when the gross liquidity referencing a tick would exceed the per-tick maximum.
    """

    def __init__(self, tick: int, liquidity_gross: int, max_liquidity: int) -> None:
        self.tick = tick
        self.liquidity_gross = liquidity_gross
        self.max_liquidity = max_liquidity
        super().__init__(
            message=f"Gross liquidity {liquidity_gross} at tick {tick} exceeds maximum {max_liquidity}"  # noqa: E501
        )

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.tick, self.liquidity_gross, self.max_liquidity)


class InsufficientInputAmount(LiquidityPoolError):
    """
    Raised when the pool balance of a token did not increase by the amount owed after the
    settlement callback returned.
    """

    def __init__(self, token: ChecksumAddress, amount_owed: int, amount_received: int) -> None:
        self.token = token
        self.amount_owed = amount_owed
        self.amount_received = amount_received
        super().__init__(
            message=f"Insufficient input amount for token {token}: owed {amount_owed}, received {amount_received}"  # noqa: E501
        )

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.token, self.amount_owed, self.amount_received)


class InvalidSwapAmount(LiquidityPoolError):
    def __init__(self) -> None:
        """
        Raised if a swap amount is zero.
        """

        super().__init__(message="The swap amount is invalid.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, ()


class InvalidPriceLimit(LiquidityPoolError):
    """
    Raised when a swap price limit lies on the wrong side of the current price or outside the
    supported price range.
    """

    def __init__(self, sqrt_price_limit_x96: int) -> None:
        self.sqrt_price_limit_x96 = sqrt_price_limit_x96
        super().__init__(message=f"Invalid price limit {sqrt_price_limit_x96}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.sqrt_price_limit_x96,)


class PoolLocked(LiquidityPoolError):
    def __init__(self) -> None:
        """
        Raised when a state-modifying method is called while another operation is in progress.
        """

        super().__init__(message="The pool is locked by an operation in progress.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, ()


class TransferFailed(LiquidityPoolError):
    """
    Raised when a token transfer out of the pool is rejected.
    """

    def __init__(self, token: ChecksumAddress, recipient: ChecksumAddress, amount: int) -> None:
        self.token = token
        self.recipient = recipient
        self.amount = amount
        super().__init__(message=f"Transfer of {amount} {token} to {recipient} failed")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.token, self.recipient, self.amount)
