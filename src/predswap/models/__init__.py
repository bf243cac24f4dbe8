"""Result and state models (Pydantic) - quotes, swaps, pool snapshots, challenges."""

from predswap.models.challenge import ChallengeFill, CpmmPool
from predswap.models.pool import PoolSnapshot, TickBoundary
from predswap.models.quote import LiquidityQuote, Side, SwapResult

__all__ = [
    "Side",
    "LiquidityQuote",
    "SwapResult",
    "PoolSnapshot",
    "TickBoundary",
    "CpmmPool",
    "ChallengeFill",
]
