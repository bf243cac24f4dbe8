"""Side, LiquidityQuote, SwapResult - results returned by the pricing core."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class Side(str, Enum):
    """Outcome bought by a swap."""

    YES = "YES"
    NO = "NO"

    @property
    def opposite(self) -> Side:
        return Side.NO if self is Side.YES else Side.YES


class LiquidityQuote(BaseModel):
    """Outcome shares required to open (or refunded on closing) a liquidity position."""

    tick_lower: int
    tick_upper: int
    delta_liquidity: float = Field(..., gt=0)
    required_yes: float = Field(..., ge=0)
    required_no: float = Field(..., ge=0)


class SwapResult(BaseModel):
    """Outcome of a swap. filled=False means the pool ran out of liquidity (partial fill)."""

    side: Side
    amount_in: float = Field(..., ge=0)
    amount_used: float = Field(..., ge=0)
    shares_out: float = Field(..., ge=0)
    tick_before: int
    tick_after: int
    prob_before: float = Field(..., gt=0, lt=1)
    prob_after: float = Field(..., gt=0, lt=1)
    crossings: int = 0
    filled: bool = True

    @property
    def amount_unused(self) -> float:
        return max(0.0, self.amount_in - self.amount_used)

    @property
    def average_price(self) -> float | None:
        """Currency paid per share received."""
        if self.shares_out <= 0:
            return None
        return self.amount_used / self.shares_out
