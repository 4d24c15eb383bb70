import contextlib
import dataclasses
from collections.abc import Generator
from fractions import Fraction
from threading import Lock
from typing import Any
from weakref import WeakSet

from eth_typing import ChecksumAddress

from clamm.checksum_cache import get_checksum_address
from clamm.config import settings
from clamm.constants import MAX_UINT128
from clamm.exceptions import (
    ClammValueError,
    EVMRevertError,
    InsufficientInputAmount,
    InvalidPriceLimit,
    InvalidSwapAmount,
    InvalidTickRange,
    LiquidityPoolError,
    PoolLocked,
    TransferFailed,
    ZeroLiquidity,
)
from clamm.libraries.constants import FEE_DENOMINATOR
from clamm.libraries.liquidity_amounts import get_amounts_for_liquidity_delta
from clamm.libraries.liquidity_math import add_delta
from clamm.libraries.swap_math import compute_swap_step
from clamm.libraries.tick_math import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
)
from clamm.logging import logger
from clamm.pool.functions import exchange_rate_from_sqrt_price_x96
from clamm.pool.position_ledger import PositionLedger
from clamm.pool.settlement import MintCallback, SwapCallback
from clamm.pool.tick_ledger import TickLedger
from clamm.pool.types import (
    PoolMint,
    PoolSimulationResult,
    PoolState,
    PoolStateUpdated,
    PoolSwap,
    PositionInfo,
    PriceState,
    TickInfo,
)
from clamm.types.abstract import AbstractErc20Token, AbstractLiquidityPool
from clamm.types.aliases import Liquidity, SqrtPriceX96, Tick
from clamm.types.concrete import AbstractPublisherMessage, PublisherMixin, Subscriber

type Token0Amount = int
type Token1Amount = int


@dataclasses.dataclass(slots=True, eq=False)
class StagedState:
    """
    The working copy of the pool state modified by an operation in progress. It replaces the
    committed state only after the operation completes, and is discarded otherwise.
    """

    liquidity: Liquidity
    sqrt_price_x96: SqrtPriceX96
    tick: Tick
    ticks: TickLedger
    positions: PositionLedger


class ConcentratedLiquidityPool(PublisherMixin, AbstractLiquidityPool):
    """
    A concentrated liquidity pool holding liquidity positions over tick ranges.

    Liquidity is added by `mint` and traded against by `swap`. Both operations settle after
    transfer: the pool computes the amounts owed, calls back into the caller, and then verifies
    its own token balances. All state changes made by an operation are staged and committed only
    if the operation completes, so a failed operation leaves the pool as it was before the call.
    """

    @dataclasses.dataclass(slots=True, eq=False)
    class SwapState:
        amount_specified_remaining: int
        amount_calculated: int
        sqrt_price_x96: int
        tick: int
        liquidity: int

        def __post_init__(self) -> None:
            assert self.liquidity >= 0

    @dataclasses.dataclass(slots=True, eq=False)
    class StepComputations:
        sqrt_price_start_x96: int = 0
        sqrt_price_next_x96: int = 0
        tick_next: int = 0
        initialized: bool = False
        amount_in: int = 0
        amount_out: int = 0
        fee_amount: int = 0

    def __init__(
        self,
        address: str,
        token0: AbstractErc20Token,
        token1: AbstractErc20Token,
        *,
        sqrt_price_x96: SqrtPriceX96,
        tick: Tick | None = None,
        fee: int | None = None,
        tick_spacing: int | None = None,
        silent: bool = False,
    ) -> None:
        self.address = get_checksum_address(address)

        if not token0 < token1:
            raise ClammValueError(
                message=f"Tokens must be sorted by address: {token0.address} >= {token1.address}"
            )
        self.token0 = token0
        self.token1 = token1

        self.fee = fee if fee is not None else settings.pool.fee
        if not (0 <= self.fee < FEE_DENOMINATOR):
            raise ClammValueError(message=f"Invalid fee {self.fee}")

        self.tick_spacing = tick_spacing if tick_spacing is not None else settings.pool.tick_spacing
        if self.tick_spacing <= 0:
            raise ClammValueError(message=f"Invalid tick spacing {self.tick_spacing}")

        try:
            derived_tick = get_tick_at_sqrt_ratio(sqrt_price_x96)
        except EVMRevertError as exc:
            raise ClammValueError(message=f"Invalid starting price {sqrt_price_x96}") from exc
        if tick is not None and tick != derived_tick:
            raise ClammValueError(
                message=f"Tick {tick} does not match starting price (expected {derived_tick})"
            )

        self.name = f"{self.token0}-{self.token1} ({self.__class__.__name__}, {100 * self.fee / FEE_DENOMINATOR:.2f}%)"  # noqa: E501

        self._liquidity: Liquidity = 0
        self._price = PriceState(sqrt_price_x96=sqrt_price_x96, tick=derived_tick)
        self._tick_ledger = TickLedger(tick_spacing=self.tick_spacing)
        self._position_ledger = PositionLedger()
        self._state = self._build_state()

        self._state_lock = Lock()
        self._subscribers: WeakSet[Subscriber] = WeakSet()

        if not silent:  # pragma: no branch
            logger.info(self.name)
            logger.info(f"• Address: {self.address}")
            logger.info(f"• Token 0: {self.token0}")
            logger.info(f"• Token 1: {self.token1}")
            logger.info(f"• Fee: {self.fee}")
            logger.info(f"• Tick Spacing: {self.tick_spacing}")
            logger.info(f"• SqrtPrice: {self.sqrt_price_x96}")
            logger.info(f"• Tick: {self.tick}")

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(address={self.address}, token0={self.token0}, token1={self.token1}, fee={100 * self.fee / FEE_DENOMINATOR:.2f}%, tick spacing={self.tick_spacing})"  # noqa:E501

    def _notify_subscribers(self, message: AbstractPublisherMessage) -> None:
        for subscriber in self._subscribers:
            subscriber.notify(publisher=self, message=message)

    def _build_state(self) -> PoolState:
        return PoolState(
            address=self.address,
            liquidity=self._liquidity,
            sqrt_price_x96=self._price.sqrt_price_x96,
            tick=self._price.tick,
            tick_bitmap=self._tick_ledger.tick_bitmap,
            tick_data=self._tick_ledger.tick_data,
            positions=self._position_ledger.positions,
        )

    @contextlib.contextmanager
    def _transaction(self) -> Generator[StagedState, None, None]:
        """
        Stage a copy of the mutable state for an operation, committing it if the block completes
        and discarding it if any exception is raised.

        The lock is not re-entrant, so a state-modifying call made from inside a settlement
        callback is rejected with `PoolLocked`.
        """

        if not self._state_lock.acquire(blocking=False):
            raise PoolLocked

        try:
            staged = StagedState(
                liquidity=self._liquidity,
                sqrt_price_x96=self._price.sqrt_price_x96,
                tick=self._price.tick,
                ticks=self._tick_ledger.copy(),
                positions=self._position_ledger.copy(),
            )
            try:
                yield staged
            except Exception as exc:
                logger.debug(f"{self.name}: rolled back staged state after {exc!r}")
                raise

            self._liquidity = staged.liquidity
            self._price = PriceState(sqrt_price_x96=staged.sqrt_price_x96, tick=staged.tick)
            self._tick_ledger = staged.ticks
            self._position_ledger = staged.positions
            self._state = self._build_state()
        finally:
            self._state_lock.release()

    def _check_ticks(self, tick_lower: Tick, tick_upper: Tick) -> None:
        if tick_lower >= tick_upper:
            raise InvalidTickRange(tick_lower, tick_upper, "lower tick must be below upper tick")
        if tick_lower < MIN_TICK:
            raise InvalidTickRange(tick_lower, tick_upper, "lower tick below minimum")
        if tick_upper > MAX_TICK:
            raise InvalidTickRange(tick_lower, tick_upper, "upper tick above maximum")
        if tick_lower % self.tick_spacing != 0 or tick_upper % self.tick_spacing != 0:
            raise InvalidTickRange(
                tick_lower, tick_upper, f"ticks must be multiples of {self.tick_spacing}"
            )

    def _pay(self, token: AbstractErc20Token, recipient: ChecksumAddress, amount: int) -> None:
        if not token.transfer(sender=self.address, recipient=recipient, amount=amount):
            raise TransferFailed(token=token.address, recipient=recipient, amount=amount)

    def _verify_payment(
        self,
        token: AbstractErc20Token,
        balance_before: int,
        amount_owed: int,
    ) -> None:
        amount_received = token.balance_of(self.address) - balance_before
        if amount_received < amount_owed:
            raise InsufficientInputAmount(
                token=token.address,
                amount_owed=amount_owed,
                amount_received=amount_received,
            )

    def _calculate_swap(
        self,
        *,
        zero_for_one: bool,
        amount_specified: int,
        sqrt_price_limit_x96: SqrtPriceX96,
        liquidity: Liquidity,
        sqrt_price_x96: SqrtPriceX96,
        tick: Tick,
        ticks: TickLedger,
    ) -> tuple[Token0Amount, Token1Amount, SqrtPriceX96, Liquidity, Tick]:
        """
        This function is ported and adapted from the UniswapV3Pool.sol contract at
        https://github.com/Uniswap/v3-core/blob/main/contracts/UniswapV3Pool.sol

        Returns a tuple with amounts and final pool state values for a successful swap:
        (amount0, amount1, sqrt_price_x96, liquidity, tick)

        A negative amount indicates the token quantity sent to the swapper, and a positive amount
        indicates the token quantity deposited. No state is modified.
        """

        if amount_specified == 0:
            raise InvalidSwapAmount

        if zero_for_one and not (MIN_SQRT_RATIO < sqrt_price_limit_x96 < sqrt_price_x96):
            raise InvalidPriceLimit(sqrt_price_limit_x96)
        if not zero_for_one and not (sqrt_price_x96 < sqrt_price_limit_x96 < MAX_SQRT_RATIO):
            raise InvalidPriceLimit(sqrt_price_limit_x96)

        exact_input = amount_specified > 0

        swap_state = self.SwapState(
            amount_specified_remaining=amount_specified,
            amount_calculated=0,
            sqrt_price_x96=sqrt_price_x96,
            tick=tick,
            liquidity=liquidity,
        )
        step = self.StepComputations()

        while (
            swap_state.amount_specified_remaining != 0
            and swap_state.sqrt_price_x96 != sqrt_price_limit_x96
        ):
            step.sqrt_price_start_x96 = swap_state.sqrt_price_x96
            step.tick_next, step.initialized = ticks.next_initialized_tick(
                tick=swap_state.tick,
                less_than_or_equal=zero_for_one,
            )
            step.sqrt_price_next_x96 = get_sqrt_ratio_at_tick(step.tick_next)

            # compute values to swap to the target tick, price limit, or point where the input or
            # output amount is exhausted
            swap_state.sqrt_price_x96, step.amount_in, step.amount_out, step.fee_amount = (
                compute_swap_step(
                    sqrt_ratio_x96_current=swap_state.sqrt_price_x96,
                    sqrt_ratio_x96_target=(
                        sqrt_price_limit_x96
                        if (
                            step.sqrt_price_next_x96 < sqrt_price_limit_x96
                            if zero_for_one
                            else step.sqrt_price_next_x96 > sqrt_price_limit_x96
                        )
                        else step.sqrt_price_next_x96
                    ),
                    liquidity=swap_state.liquidity,
                    amount_remaining=swap_state.amount_specified_remaining,
                    fee_pips=self.fee,
                )
            )

            if exact_input:
                swap_state.amount_specified_remaining -= step.amount_in + step.fee_amount
                swap_state.amount_calculated -= step.amount_out
            else:
                swap_state.amount_specified_remaining += step.amount_out
                swap_state.amount_calculated += step.amount_in + step.fee_amount

            if swap_state.sqrt_price_x96 == step.sqrt_price_next_x96:
                # If the next tick is initialized, adjust the in-range liquidity
                if step.initialized:
                    liquidity_net = ticks.cross(step.tick_next)
                    swap_state.liquidity = add_delta(
                        swap_state.liquidity,
                        -liquidity_net if zero_for_one else liquidity_net,
                    )
                swap_state.tick = step.tick_next - 1 if zero_for_one else step.tick_next
            elif swap_state.sqrt_price_x96 != step.sqrt_price_start_x96:
                # Recompute unless on a lower tick boundary (i.e. already transitioned ticks) and
                # the price has not moved
                swap_state.tick = get_tick_at_sqrt_ratio(swap_state.sqrt_price_x96)

        amount0, amount1 = (
            (
                amount_specified - swap_state.amount_specified_remaining,
                swap_state.amount_calculated,
            )
            if zero_for_one == exact_input
            else (
                swap_state.amount_calculated,
                amount_specified - swap_state.amount_specified_remaining,
            )
        )

        return amount0, amount1, swap_state.sqrt_price_x96, swap_state.liquidity, swap_state.tick

    @property
    def liquidity(self) -> Liquidity:
        return self._liquidity

    @property
    def sqrt_price_x96(self) -> SqrtPriceX96:
        return self._price.sqrt_price_x96

    @property
    def tick(self) -> Tick:
        return self._price.tick

    @property
    def price_state(self) -> PriceState:
        return self._price

    @property
    def state(self) -> PoolState:
        return self._state

    @property
    def tick_bitmap(self) -> dict[int, int]:
        return self._tick_ledger.tick_bitmap

    @property
    def tick_data(self) -> dict[Tick, TickInfo]:
        return self._tick_ledger.tick_data

    @property
    def tokens(self) -> tuple[AbstractErc20Token, AbstractErc20Token]:
        return self.token0, self.token1

    def get_position(self, owner: str, tick_lower: Tick, tick_upper: Tick) -> PositionInfo:
        return self._position_ledger.get(owner, tick_lower, tick_upper)

    def get_tick(self, tick: Tick) -> TickInfo:
        return self._tick_ledger.get(tick)

    def mint(
        self,
        owner: str,
        tick_lower: Tick,
        tick_upper: Tick,
        amount: Liquidity,
        callback: MintCallback,
        data: bytes = b"",
    ) -> tuple[Token0Amount, Token1Amount]:
        """
        Add `amount` liquidity to the position held by `owner` over [tick_lower, tick_upper).

        The token amounts owed are passed to `callback.on_mint_settle`, which must transfer them
        to the pool before returning. If the pool balances do not increase by at least the owed
        amounts, the mint fails with `InsufficientInputAmount` and no state is changed.

        Returns the token amounts (amount0, amount1) owed for the liquidity.

        @dev This method uses a lock to guard state-modifying methods. A re-entrant call raises
        `PoolLocked`.
        """

        self._check_ticks(tick_lower, tick_upper)
        if amount == 0:
            raise ZeroLiquidity
        if not (0 < amount <= MAX_UINT128):
            raise ClammValueError(message=f"Invalid liquidity amount {amount}")

        owner = get_checksum_address(owner)
        sender = get_checksum_address(callback.address)

        with self._transaction() as staged:
            for tick, upper in ((tick_lower, False), (tick_upper, True)):
                if staged.ticks.update(tick, amount, upper=upper):
                    logger.debug(f"{self.name}: tick {tick} initialized")

            staged.positions.update(owner, tick_lower, tick_upper, amount)

            amount0, amount1 = get_amounts_for_liquidity_delta(
                sqrt_price_x96=staged.sqrt_price_x96,
                tick=staged.tick,
                tick_lower=tick_lower,
                tick_upper=tick_upper,
                liquidity_delta=amount,
            )

            # Liquidity positions include the lower tick, but exclude the upper tick
            if tick_lower <= staged.tick < tick_upper:
                staged.liquidity = add_delta(staged.liquidity, amount)

            balance0_before = self.token0.balance_of(self.address) if amount0 > 0 else 0
            balance1_before = self.token1.balance_of(self.address) if amount1 > 0 else 0

            callback.on_mint_settle(amount0, amount1, data)

            if amount0 > 0:
                self._verify_payment(self.token0, balance0_before, amount0)
            if amount1 > 0:
                self._verify_payment(self.token1, balance1_before, amount1)

        logger.debug(
            f"{self.name}: minted {amount} liquidity for {owner} over [{tick_lower}, {tick_upper}), amounts=({amount0}, {amount1})"  # noqa: E501
        )
        self._notify_subscribers(
            PoolMint(
                sender=sender,
                owner=owner,
                tick_lower=tick_lower,
                tick_upper=tick_upper,
                amount=amount,
                amount0=amount0,
                amount1=amount1,
            )
        )
        self._notify_subscribers(PoolStateUpdated(self.state))

        return amount0, amount1

    def swap(
        self,
        recipient: str,
        zero_for_one: bool,
        amount_specified: int,
        callback: SwapCallback,
        sqrt_price_limit_x96: SqrtPriceX96 | None = None,
        data: bytes = b"",
    ) -> tuple[Token0Amount, Token1Amount]:
        """
        Swap token0 for token1 (`zero_for_one=True`) or token1 for token0.

        A positive `amount_specified` is an exact input amount, a negative value is an exact
        output amount. The output token is transferred to `recipient` first, then
        `callback.on_swap_settle` is called with the signed deltas and must transfer the input
        amount to the pool. If the input balance does not increase by the amount owed, the swap
        fails with `InsufficientInputAmount` and the pool state is unchanged. The output transfer
        has already happened at that point and is not reversed by the pool.

        Returns the signed token deltas (amount0, amount1) from the pool's perspective.

        @dev This method uses a lock to guard state-modifying methods. A re-entrant call raises
        `PoolLocked`.
        """

        if amount_specified == 0:
            raise InvalidSwapAmount

        recipient = get_checksum_address(recipient)
        sender = get_checksum_address(callback.address)

        if sqrt_price_limit_x96 is None:
            sqrt_price_limit_x96 = MIN_SQRT_RATIO + 1 if zero_for_one else MAX_SQRT_RATIO - 1

        with self._transaction() as staged:
            amount0, amount1, sqrt_price_x96, liquidity, tick = self._calculate_swap(
                zero_for_one=zero_for_one,
                amount_specified=amount_specified,
                sqrt_price_limit_x96=sqrt_price_limit_x96,
                liquidity=staged.liquidity,
                sqrt_price_x96=staged.sqrt_price_x96,
                tick=staged.tick,
                ticks=staged.ticks,
            )

            token_in, token_out = (
                (self.token0, self.token1) if zero_for_one else (self.token1, self.token0)
            )
            amount_in, amount_out = (amount0, amount1) if zero_for_one else (amount1, amount0)

            if amount_out < 0:
                self._pay(token_out, recipient, -amount_out)

            balance_in_before = token_in.balance_of(self.address)
            callback.on_swap_settle(amount0, amount1, data)
            self._verify_payment(token_in, balance_in_before, amount_in)

            staged.sqrt_price_x96 = sqrt_price_x96
            staged.tick = tick
            staged.liquidity = liquidity

        logger.debug(
            f"{self.name}: swapped amounts=({amount0}, {amount1}), sqrt_price_x96={sqrt_price_x96}, tick={tick}, liquidity={liquidity}"  # noqa: E501
        )
        self._notify_subscribers(
            PoolSwap(
                sender=sender,
                recipient=recipient,
                amount0=amount0,
                amount1=amount1,
                sqrt_price_x96=sqrt_price_x96,
                liquidity=liquidity,
                tick=tick,
            )
        )
        self._notify_subscribers(PoolStateUpdated(self.state))

        return amount0, amount1

    def _simulate_swap(
        self,
        zero_for_one: bool,
        amount_specified: int,
        sqrt_price_limit_x96: SqrtPriceX96 | None,
    ) -> PoolSimulationResult:
        # Read a consistent set of committed values
        state = self._state
        tick_ledger = self._tick_ledger

        try:
            amount0_delta, amount1_delta, end_sqrt_price_x96, end_liquidity, end_tick = (
                self._calculate_swap(
                    zero_for_one=zero_for_one,
                    amount_specified=amount_specified,
                    sqrt_price_limit_x96=(
                        sqrt_price_limit_x96
                        if sqrt_price_limit_x96 is not None
                        else (MIN_SQRT_RATIO + 1 if zero_for_one else MAX_SQRT_RATIO - 1)
                    ),
                    liquidity=state.liquidity,
                    sqrt_price_x96=state.sqrt_price_x96,
                    tick=state.tick,
                    ticks=tick_ledger,
                )
            )
        except EVMRevertError as e:  # pragma: no cover
            raise LiquidityPoolError(message=f"Simulated execution reverted: {e}") from e

        return PoolSimulationResult(
            amount0_delta=amount0_delta,
            amount1_delta=amount1_delta,
            initial_state=state,
            final_state=dataclasses.replace(
                state,
                liquidity=end_liquidity,
                sqrt_price_x96=end_sqrt_price_x96,
                tick=end_tick,
            ),
        )

    def simulate_exact_input_swap(
        self,
        token_in: AbstractErc20Token,
        token_in_quantity: int,
        sqrt_price_limit_x96: SqrtPriceX96 | None = None,
    ) -> PoolSimulationResult:
        """
        Simulate an exact input swap against the committed state, without modifying it.
        """

        if token_in not in self.tokens:
            raise ClammValueError(message=f"Unknown token {token_in}")

        return self._simulate_swap(
            zero_for_one=token_in == self.token0,
            amount_specified=token_in_quantity,
            sqrt_price_limit_x96=sqrt_price_limit_x96,
        )

    def simulate_exact_output_swap(
        self,
        token_out: AbstractErc20Token,
        token_out_quantity: int,
        sqrt_price_limit_x96: SqrtPriceX96 | None = None,
    ) -> PoolSimulationResult:
        """
        Simulate an exact output swap against the committed state, without modifying it.
        """

        if token_out not in self.tokens:
            raise ClammValueError(message=f"Unknown token {token_out}")

        return self._simulate_swap(
            zero_for_one=token_out == self.token1,
            amount_specified=-token_out_quantity,
            sqrt_price_limit_x96=sqrt_price_limit_x96,
        )

    def get_absolute_exchange_rate(self, token: AbstractErc20Token) -> Fraction:
        """
        Get the absolute exchange rate for the given token, expressed in terms of a unit amount of
        its paired token.
        """

        if token not in self.tokens:
            raise ClammValueError(message=f"Unknown token {token}")

        rate = exchange_rate_from_sqrt_price_x96(self.sqrt_price_x96)
        return rate if token == self.token1 else 1 / rate

    def get_absolute_price(self, token: AbstractErc20Token) -> Fraction:
        """
        Get the absolute price for the given token, expressed in units of the other.
        """

        return 1 / self.get_absolute_exchange_rate(token)

    def get_nominal_price(self, token: AbstractErc20Token) -> Fraction:
        """
        Get the nominal price for the given token, expressed in units of the other, corrected for
        decimal place values.
        """

        return 1 / (
            self.get_absolute_exchange_rate(token)
            * (
                Fraction(10**self.token1.decimals, 10**self.token0.decimals)
                if token == self.token0
                else Fraction(10**self.token0.decimals, 10**self.token1.decimals)
            )
        )

    def __getstate__(self) -> dict[str, Any]:
        # Remove attributes that cannot be pickled
        dropped_attributes = {
            "_state_lock",
            "_subscribers",
        }

        if not self._state_lock.acquire(blocking=False):
            raise PoolLocked

        try:
            return {k: v for k, v in self.__dict__.items() if k not in dropped_attributes}
        finally:
            self._state_lock.release()

    def __setstate__(self, state: dict[str, Any]) -> None:
        state["_state_lock"] = Lock()
        state["_subscribers"] = WeakSet()
        self.__dict__ = state
