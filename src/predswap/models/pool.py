"""PoolSnapshot, TickBoundary - serializable pool state for hosts that persist it."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TickBoundary(BaseModel):
    """One populated tick of the ledger."""

    tick: int
    liquidity_net: float
    liquidity_gross: float = Field(..., gt=0)


class PoolSnapshot(BaseModel):
    """Full Swap3 pool state: active liquidity, current tick, populated boundaries."""

    liquidity: float = Field(0.0, ge=0)
    tick: int = 0
    ticks: list[TickBoundary] = Field(default_factory=list)
