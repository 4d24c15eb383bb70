type Liquidity = int
type LiquidityGross = int
type LiquidityNet = int
type Pip = int  # pool fees are expressed in pips equaling one hundredth of 1%
type SqrtPriceX96 = int
type Tick = int
type Word = int
type Bitmap = int
