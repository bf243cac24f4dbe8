"""CpmmPool, ChallengeFill - constant-product pool and peer-to-peer wager pricing."""

from __future__ import annotations

from pydantic import BaseModel, Field


class CpmmPool(BaseModel):
    """Constant-product pool with weight p: YES^p * NO^(1-p) = k."""

    yes: float = Field(..., ge=0)
    no: float = Field(..., ge=0)
    p: float = Field(0.5, gt=0, lt=1)


class ChallengeFill(BaseModel):
    """Shares minted for both sides of an accepted challenge and the resulting pool."""

    amount: float = Field(..., gt=0)
    creators_outcome: str = Field(..., pattern="^(YES|NO)$")
    acceptors_outcome: str = Field(..., pattern="^(YES|NO)$")
    creator_shares: float = Field(..., gt=0)
    acceptor_shares: float = Field(..., gt=0)
    pool_before: CpmmPool
    pool_after: CpmmPool
    prob_before: float
    prob_after: float
