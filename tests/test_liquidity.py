"""Liquidity provisioning: quotes, commits, withdrawals."""

import pytest

from predswap.amm.codec import sqrt_ratio, tick_of
from predswap.amm.liquidity import (
    close_position,
    liquidity_for_amounts,
    open_position,
    quote_liquidity,
    quote_withdrawal,
)
from predswap.amm.pool import Pool, check_pool
from predswap.errors import DomainError


def test_straddling_range_needs_both_outcomes():
    pool = Pool(liquidity=100, tick=tick_of(0.3))
    lower, upper = tick_of(0.2), tick_of(0.33)
    q = quote_liquidity(pool, lower, upper, 100)
    assert q.required_yes > 0
    assert q.required_no > 0
    sc, sa, sb = sqrt_ratio(pool.tick), sqrt_ratio(lower), sqrt_ratio(upper)
    assert abs(q.required_yes - 100 * (1 / sc - 1 / sb)) < 1e-9
    assert abs(q.required_no - 100 * (sc - sa)) < 1e-9


def test_range_above_price_is_all_yes():
    pool = Pool(liquidity=100, tick=tick_of(0.1))
    q = quote_liquidity(pool, tick_of(0.2), tick_of(0.33), 100)
    assert q.required_yes > 0
    assert q.required_no == 0


def test_range_below_price_is_all_no():
    pool = Pool(liquidity=100, tick=tick_of(0.5))
    q = quote_liquidity(pool, tick_of(0.2), tick_of(0.33), 100)
    assert q.required_yes == 0
    assert q.required_no > 0


def test_quote_at_range_edges_matches_one_sided_cases():
    lower, upper = tick_of(0.2), tick_of(0.33)
    at_lower = quote_liquidity(Pool(tick=lower), lower, upper, 10)
    below = quote_liquidity(Pool(tick=lower - 50), lower, upper, 10)
    assert at_lower.required_no == 0
    assert abs(at_lower.required_yes - below.required_yes) < 1e-12
    at_upper = quote_liquidity(Pool(tick=upper), lower, upper, 10)
    assert at_upper.required_yes == 0


def test_quote_is_idempotent_and_pure():
    pool = Pool(tick=tick_of(0.3))
    open_position(pool, tick_of(0.1), tick_of(0.9), 40)
    before = pool.copy()
    q1 = quote_liquidity(pool, tick_of(0.2), tick_of(0.33), 100)
    q2 = quote_liquidity(pool, tick_of(0.2), tick_of(0.33), 100)
    assert q1 == q2
    assert pool == before


@pytest.mark.parametrize(
    "lower, upper, delta",
    [(10, 10, 1.0), (20, 10, 1.0), (0, 10, 0.0), (0, 10, -5.0), (0, 10, float("nan")), (0, 10**9, 1.0)],
)
def test_invalid_requests_raise(lower, upper, delta):
    with pytest.raises(DomainError):
        quote_liquidity(Pool(), lower, upper, delta)


def test_open_in_range_activates_liquidity():
    pool = Pool(tick=tick_of(0.3))
    lower, upper = tick_of(0.2), tick_of(0.33)
    expected = quote_liquidity(pool, lower, upper, 100)
    paid = open_position(pool, lower, upper, 100)
    assert paid == expected
    assert pool.liquidity == 100
    assert pool.ledger.get(lower).liquidity_net == 100
    assert pool.ledger.get(upper).liquidity_net == -100
    assert pool.ledger.get(lower).liquidity_gross == 100
    check_pool(pool)


def test_open_out_of_range_leaves_active_liquidity():
    pool = Pool(tick=tick_of(0.5))
    open_position(pool, tick_of(0.2), tick_of(0.33), 100)
    assert pool.liquidity == 0
    assert len(pool.ledger) == 2
    check_pool(pool)


def test_position_with_upper_at_current_tick_is_inactive():
    pool = Pool(tick=100)
    open_position(pool, 0, 100, 10)
    assert pool.liquidity == 0
    open_position(pool, 100, 200, 10)
    assert pool.liquidity == 10
    check_pool(pool)


def test_close_is_exact_inverse_of_open():
    pool = Pool(tick=tick_of(0.3))
    open_position(pool, tick_of(0.01), tick_of(0.99), 100)
    before = pool.copy()
    opened = open_position(pool, tick_of(0.2), tick_of(0.33), 37.5)
    refund = close_position(pool, tick_of(0.2), tick_of(0.33), 37.5)
    assert refund == opened
    assert pool == before


def test_open_close_sequence_empties_ledger():
    pool = Pool(tick=tick_of(0.4))
    ranges = [(0.1, 0.5, 10.0), (0.2, 0.3, 2.5), (0.35, 0.9, 7.0), (0.1, 0.5, 3.0)]
    for lo, hi, d in ranges:
        open_position(pool, tick_of(lo), tick_of(hi), d)
    check_pool(pool)
    for lo, hi, d in reversed(ranges):
        close_position(pool, tick_of(lo), tick_of(hi), d)
    assert len(pool.ledger) == 0
    assert pool.liquidity == 0


def test_partial_close_keeps_remaining_liquidity():
    pool = Pool(tick=tick_of(0.3))
    open_position(pool, tick_of(0.2), tick_of(0.33), 100)
    close_position(pool, tick_of(0.2), tick_of(0.33), 40)
    assert abs(pool.liquidity - 60) < 1e-9
    assert abs(pool.ledger.get(tick_of(0.2)).liquidity_gross - 60) < 1e-9
    check_pool(pool)


def test_close_more_than_held_raises_and_leaves_pool():
    pool = Pool(tick=tick_of(0.3))
    open_position(pool, tick_of(0.2), tick_of(0.33), 10)
    before = pool.copy()
    with pytest.raises(DomainError):
        close_position(pool, tick_of(0.2), tick_of(0.33), 11)
    with pytest.raises(DomainError):
        close_position(pool, tick_of(0.25), tick_of(0.33), 1)
    assert pool == before


def test_withdrawal_quote_matches_deposit_geometry():
    pool = Pool(tick=tick_of(0.3))
    assert quote_withdrawal(pool, -100, 100, 5) == quote_liquidity(pool, -100, 100, 5)


@pytest.mark.parametrize("prob", [0.1, 0.3, 0.5])
def test_liquidity_for_amounts_inverts_quote(prob):
    pool = Pool(tick=tick_of(prob))
    lower, upper = tick_of(0.2), tick_of(0.33)
    q = quote_liquidity(pool, lower, upper, 100)
    delta = liquidity_for_amounts(pool, lower, upper, q.required_yes, q.required_no)
    assert abs(delta - 100) < 1e-6


def test_liquidity_for_amounts_limited_by_scarcer_side():
    pool = Pool(tick=tick_of(0.3))
    lower, upper = tick_of(0.2), tick_of(0.33)
    q = quote_liquidity(pool, lower, upper, 100)
    delta = liquidity_for_amounts(pool, lower, upper, q.required_yes, q.required_no / 2)
    assert abs(delta - 50) < 1e-6
    assert liquidity_for_amounts(pool, lower, upper, 0, 0) == 0


def test_closing_large_position_keeps_small_one_sharing_its_lower_bound():
    pool = Pool(tick=tick_of(0.3))
    lower = tick_of(0.2)
    open_position(pool, lower, tick_of(0.33), 1e6)
    open_position(pool, lower, tick_of(0.4), 5e-4)

    close_position(pool, lower, tick_of(0.33), 1e6)
    assert list(pool.ledger) == [lower, tick_of(0.4)]
    assert abs(pool.liquidity - 5e-4) < 1e-9
    assert abs(pool.ledger.get(lower).liquidity_gross - 5e-4) < 1e-9
    check_pool(pool)

    close_position(pool, lower, tick_of(0.4), 5e-4)
    assert len(pool.ledger) == 0
    assert pool.liquidity == 0
    check_pool(pool)
