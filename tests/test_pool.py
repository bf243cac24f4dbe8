"""Pool implied reserves, consistency checks, profile and snapshots."""

import pytest

from predswap.amm.codec import TICK_EPSILON, prob_of, tick_of
from predswap.amm.liquidity import open_position
from predswap.amm.pool import (
    Pool,
    check_pool,
    from_snapshot,
    liquidity_profile,
    no_shares,
    probability_of,
    to_snapshot,
    yes_shares,
)
from predswap.errors import DomainError, EmptyPoolError, InvariantViolation
from predswap.models.pool import PoolSnapshot, TickBoundary


@pytest.fixture
def pool():
    p = Pool(tick=tick_of(0.3))
    open_position(p, tick_of(0.01), tick_of(0.99), 100)
    open_position(p, tick_of(0.2), tick_of(0.33), 100)
    return p


def test_implied_reserves_follow_constant_product():
    p = Pool(liquidity=100, tick=tick_of(0.3))
    y, n = yes_shares(p), no_shares(p)
    assert y > 0 and n > 0
    assert abs(y * n - 100**2) < 1e-6
    assert abs(n / (y + n) - probability_of(p)) < 1e-12
    assert probability_of(p) == prob_of(p.tick)
    assert abs(probability_of(p) - 0.3) <= TICK_EPSILON


def test_even_pool_has_equal_reserves():
    p = Pool(liquidity=50, tick=0)
    assert yes_shares(p) == no_shares(p) == 50


@pytest.mark.parametrize("query", [yes_shares, no_shares, probability_of])
def test_empty_pool_has_no_price(query):
    with pytest.raises(EmptyPoolError):
        query(Pool())
    with pytest.raises(DomainError):
        query(Pool(liquidity=0.0, tick=tick_of(0.7)))


def test_check_pool_accepts_consistent_state(pool):
    assert pool.liquidity == 200
    check_pool(pool)


def test_check_pool_rejects_liquidity_without_positions():
    with pytest.raises(InvariantViolation):
        check_pool(Pool(liquidity=5, tick=0))


def test_check_pool_rejects_drifted_liquidity(pool):
    pool.liquidity = 150
    with pytest.raises(InvariantViolation):
        check_pool(pool)


def test_liquidity_profile_steps(pool):
    points = liquidity_profile(pool)
    assert points[0] == (0.0, 0.0)
    assert points[-1] == (1.0, 0.0)
    assert [level for _, level in points] == [0, 0, 100, 100, 200, 200, 100, 100, 0, 0]
    probs = [p for p, _ in points]
    assert probs == sorted(probs)
    assert abs(points[4][0] - 0.2) <= TICK_EPSILON
    assert abs(points[6][0] - 0.33) <= TICK_EPSILON


def test_profile_of_empty_pool():
    assert liquidity_profile(Pool()) == [(0.0, 0.0), (1.0, 0.0)]


def test_snapshot_round_trip(pool):
    snap = to_snapshot(pool)
    assert snap.liquidity == 200
    assert [b.tick for b in snap.ticks] == sorted(b.tick for b in snap.ticks)
    restored = from_snapshot(PoolSnapshot.model_validate_json(snap.model_dump_json()))
    assert restored == pool
    assert restored.ledger is not pool.ledger


def test_from_snapshot_rejects_inconsistent_state():
    snap = PoolSnapshot(
        liquidity=30,
        tick=0,
        ticks=[
            TickBoundary(tick=-10, liquidity_net=50, liquidity_gross=50),
            TickBoundary(tick=10, liquidity_net=-50, liquidity_gross=50),
        ],
    )
    with pytest.raises(InvariantViolation):
        from_snapshot(snap)


def test_copy_is_independent(pool):
    snapshot = pool.copy()
    assert snapshot == pool
    open_position(pool, tick_of(0.4), tick_of(0.5), 10)
    assert snapshot != pool
    assert len(snapshot.ledger) == 4
