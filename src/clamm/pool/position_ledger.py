import functools
from collections.abc import Iterator, Mapping
from typing import Self

import eth_abi.packed
from eth_utils.crypto import keccak
from hexbytes import HexBytes

from clamm.checksum_cache import get_checksum_address
from clamm.libraries.liquidity_math import add_delta
from clamm.pool.types import PositionInfo, PositionKey
from clamm.types.aliases import Tick


@functools.lru_cache(maxsize=1024)
def get_position_key(owner: str, tick_lower: Tick, tick_upper: Tick) -> PositionKey:
    """
    Generate the storage key for a position, matching the key used by the pool contract.

    ref: https://github.com/Uniswap/v3-core/blob/main/contracts/libraries/Position.sol
    """

    return HexBytes(
        keccak(
            eth_abi.packed.encode_packed(
                ("address", "int24", "int24"),
                (get_checksum_address(owner), tick_lower, tick_upper),
            )
        )
    )


class PositionLedger:
    """
    Tracks liquidity positions keyed by owner and tick range.

    Records are immutable and every change stores a new record under its key, so copies and state
    snapshots can share records with the ledger they were taken from.
    """

    def __init__(self, positions: Mapping[PositionKey, PositionInfo] | None = None) -> None:
        self._positions: dict[PositionKey, PositionInfo] = (
            dict(positions) if positions is not None else {}
        )

    def __contains__(self, key: object) -> bool:
        return key in self._positions

    def __iter__(self) -> Iterator[PositionKey]:
        return iter(self._positions)

    def __len__(self) -> int:
        return len(self._positions)

    def copy(self) -> Self:
        return self.__class__(positions=self._positions)

    @property
    def positions(self) -> dict[PositionKey, PositionInfo]:
        return self._positions.copy()

    def get(self, owner: str, tick_lower: Tick, tick_upper: Tick) -> PositionInfo:
        """
        Get the position record. Unknown positions return an empty record, which is not added to
        the ledger.
        """

        return self._positions.get(get_position_key(owner, tick_lower, tick_upper), PositionInfo())

    def update(
        self,
        owner: str,
        tick_lower: Tick,
        tick_upper: Tick,
        liquidity_delta: int,
    ) -> PositionInfo:
        """
        Apply a liquidity delta to the position, creating it if it does not exist. Returns the new
        record.
        """

        key = get_position_key(owner, tick_lower, tick_upper)
        position = self._positions.get(key, PositionInfo())
        self._positions[key] = PositionInfo.model_validate(
            position.model_dump() | {"liquidity": add_delta(position.liquidity, liquidity_delta)}
        )
        return self._positions[key]
