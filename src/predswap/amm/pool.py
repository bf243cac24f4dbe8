"""Swap3 pool state and derived quantities.

Within one tick segment the pool is a constant-product curve over virtual
reserves Y (YES) and N (NO) with Y * N = L ** 2 and N / (Y + N) = prob_of(tick).
Reserves are never stored; they are computed from (liquidity, tick).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from predswap.amm.codec import check_tick, prob_of, sqrt_ratio
from predswap.amm.ledger import LIQUIDITY_DUST, TickLedger, dust
from predswap.errors import EmptyPoolError, InvariantViolation
from predswap.models.pool import PoolSnapshot, TickBoundary


@dataclass
class Pool:
    """Mutable AMM state. Mutations must be serialized by the host."""

    liquidity: float = 0.0
    tick: int = 0
    ledger: TickLedger = field(default_factory=TickLedger)

    def copy(self) -> Pool:
        return Pool(liquidity=self.liquidity, tick=self.tick, ledger=self.ledger.copy())


def _require_liquidity(pool: Pool) -> float:
    if pool.liquidity <= 0:
        raise EmptyPoolError("pool has no active liquidity; price is undefined")
    return pool.liquidity


def yes_shares(pool: Pool) -> float:
    """Implied YES reserve."""
    return _require_liquidity(pool) / sqrt_ratio(pool.tick)


def no_shares(pool: Pool) -> float:
    """Implied NO reserve."""
    return _require_liquidity(pool) * sqrt_ratio(pool.tick)


def probability_of(pool: Pool) -> float:
    """Implied YES probability, N / (Y + N)."""
    _require_liquidity(pool)
    return prob_of(pool.tick)


def check_pool(pool: Pool) -> None:
    """Raise InvariantViolation unless the ledger nets to zero and active liquidity matches it."""
    check_tick(pool.tick)
    pool.ledger.check()
    if pool.liquidity < 0:
        raise InvariantViolation(f"negative active liquidity {pool.liquidity}")
    expected = pool.ledger.active_liquidity_at(pool.tick)
    if abs(expected - pool.liquidity) > dust(max(pool.liquidity, pool.ledger.max_gross())):
        raise InvariantViolation(
            f"active liquidity {pool.liquidity} does not match ledger ({expected}) at tick {pool.tick}"
        )


def liquidity_profile(pool: Pool) -> list[tuple[float, float]]:
    """Step function of (probability, liquidity) from 0 to 1, for plotting.

    Each boundary contributes two points: the liquidity just below and just above it.
    """
    points = [(0.0, 0.0)]
    level = 0.0
    for tick, state in pool.ledger.items():
        p = prob_of(tick)
        points.append((p, level))
        level = max(0.0, level + state.liquidity_net)
        if level <= LIQUIDITY_DUST:
            level = 0.0
        points.append((p, level))
    points.append((1.0, level))
    return points


def to_snapshot(pool: Pool) -> PoolSnapshot:
    """Export pool state as a PoolSnapshot."""
    return PoolSnapshot(
        liquidity=pool.liquidity,
        tick=pool.tick,
        ticks=[
            TickBoundary(tick=t, liquidity_net=s.liquidity_net, liquidity_gross=s.liquidity_gross)
            for t, s in pool.ledger.items()
        ],
    )


def from_snapshot(snapshot: PoolSnapshot) -> Pool:
    """Rebuild a Pool from a snapshot. Raises InvariantViolation if the snapshot is inconsistent."""
    ledger = TickLedger()
    for b in sorted(snapshot.ticks, key=lambda b: b.tick):
        ledger.restore(check_tick(b.tick), b.liquidity_net, b.liquidity_gross)
    pool = Pool(liquidity=snapshot.liquidity, tick=check_tick(snapshot.tick), ledger=ledger)
    check_pool(pool)
    return pool
