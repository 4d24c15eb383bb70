from typing import Annotated

from pydantic import Field

from clamm.constants import (
    MAX_INT128,
    MAX_UINT128,
    MAX_UINT256,
    MIN_INT128,
    MIN_UINT128,
    MIN_UINT256,
)

type ValidatedInt128 = Annotated[int, Field(strict=True, ge=MIN_INT128, le=MAX_INT128)]

type ValidatedUint128 = Annotated[int, Field(strict=True, ge=MIN_UINT128, le=MAX_UINT128)]
type ValidatedUint256 = Annotated[int, Field(strict=True, ge=MIN_UINT256, le=MAX_UINT256)]
