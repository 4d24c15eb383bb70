from . import bit_math as BitMath
from . import full_math as FullMath
from . import liquidity_amounts as LiquidityAmounts
from . import liquidity_math as LiquidityMath
from . import sqrt_price_math as SqrtPriceMath
from . import swap_math as SwapMath
from . import tick as Tick
from . import tick_bitmap as TickBitmap
from . import tick_math as TickMath
from . import unsafe_math as UnsafeMath

__all__ = (
    "BitMath",
    "FullMath",
    "LiquidityAmounts",
    "LiquidityMath",
    "SqrtPriceMath",
    "SwapMath",
    "Tick",
    "TickBitmap",
    "TickMath",
    "UnsafeMath",
)
