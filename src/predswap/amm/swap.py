"""Swap engine - buy YES or NO shares against a Swap3 pool.

Paying `amount` mints `amount` YES and `amount` NO. Buying YES, the NO shares go
into the pool and the pool pays out YES along Y * N = L ** 2, pushing the price
up; buying NO is the mirror image. The engine walks the pool one tick segment
at a time, crossing populated boundaries and applying their liquidity_net.
"""

from __future__ import annotations

import math

import structlog

from predswap.amm.codec import prob_of, sqrt_ratio, tick_at_sqrt_ratio
from predswap.amm.ledger import dust
from predswap.amm.liquidity import check_amount
from predswap.amm.pool import Pool
from predswap.errors import DomainError, InvariantViolation
from predswap.models.quote import Side, SwapResult

log = structlog.get_logger(__name__)

# Remaining amount below this fraction of the order is float residue, not an unfilled part.
_AMOUNT_RESIDUE = 1e-12


class _SwapState:
    """Working copy of the pool's price state while a swap is in progress."""

    __slots__ = ("tick", "liquidity", "remaining", "shares", "crossings", "exhausted")

    def __init__(self, tick: int, liquidity: float, amount: float) -> None:
        self.tick = tick
        self.liquidity = liquidity
        self.remaining = amount
        self.shares = 0.0
        self.crossings = 0
        self.exhausted = False  # stopped with amount left (no liquidity or crossing limit)


def _coerce_side(side: Side | str) -> Side:
    try:
        return Side(side)
    except ValueError:
        raise DomainError(f"side must be YES or NO, got {side!r}") from None


def _step_up(pool: Pool, st: _SwapState, max_crossings: int | None) -> None:
    """Buy YES: move the price up to the next boundary or until the amount runs out."""
    if st.liquidity <= 0:
        st.exhausted = True
        return
    nxt = pool.ledger.next_above(st.tick)
    if nxt is None:
        raise InvariantViolation(f"active liquidity {st.liquidity} with no boundary above tick {st.tick}")
    at_limit = max_crossings is not None and st.crossings >= max_crossings
    target = nxt - 1 if at_limit else nxt
    if target <= st.tick:
        st.exhausted = True
        return

    L = st.liquidity
    s, s_target = sqrt_ratio(st.tick), sqrt_ratio(target)
    need = L * (s_target - s)
    if st.remaining >= need:
        st.shares += need + L * (1.0 / s - 1.0 / s_target)
        st.remaining -= need
        st.tick = target
        if at_limit:
            st.exhausted = st.remaining > 0
            return
        crossed = L + pool.ledger.net_at(target)
        if crossed < -dust(L):
            raise InvariantViolation(f"crossing tick {target} upward leaves negative liquidity {crossed}")
        st.liquidity = crossed if crossed > dust(L) else 0.0
        st.crossings += 1
        log.debug("tick_crossed", tick=target, direction="up", liquidity=st.liquidity)
        return

    # Stop inside the segment; round the tick down so the pool keeps the remainder.
    t_exact = tick_at_sqrt_ratio(s + st.remaining / L)
    new_tick = min(max(math.floor(t_exact), st.tick), target - 1)
    st.shares += st.remaining + L * (1.0 / s - 1.0 / sqrt_ratio(new_tick))
    st.remaining = 0.0
    st.tick = new_tick


def _step_down(pool: Pool, st: _SwapState, max_crossings: int | None) -> None:
    """Buy NO: move the price down to the next boundary or until the amount runs out.

    Sitting exactly on a boundary, the liquidity below it is the active liquidity
    minus that boundary's net; leaving the boundary downward is the crossing.
    """
    start = st.tick
    on_boundary = start in pool.ledger
    L = st.liquidity
    if on_boundary:
        if max_crossings is not None and st.crossings >= max_crossings:
            st.exhausted = True
            return
        L = st.liquidity - pool.ledger.net_at(st.tick)
        if L < -dust(st.liquidity):
            raise InvariantViolation(f"crossing tick {st.tick} downward leaves negative liquidity {L}")
        if L <= dust(st.liquidity):
            L = 0.0
    if L <= 0:
        st.exhausted = True
        return
    target = pool.ledger.next_below(st.tick)
    if target is None:
        raise InvariantViolation(f"active liquidity {L} with no boundary below tick {st.tick}")

    s, s_target = sqrt_ratio(st.tick), sqrt_ratio(target)
    need = L * (1.0 / s_target - 1.0 / s)
    if st.remaining >= need:
        st.shares += need + L * (s - s_target)
        st.remaining -= need
        st.tick = target
        st.liquidity = L
        if on_boundary:
            st.crossings += 1
            log.debug("tick_crossed", tick=start, direction="down", liquidity=L)
        return

    # Stop inside the segment; round the tick up so the pool keeps the remainder.
    t_exact = tick_at_sqrt_ratio(1.0 / (1.0 / s + st.remaining / L))
    new_tick = max(min(math.ceil(t_exact), st.tick), target + 1)
    st.shares += st.remaining
    if new_tick != st.tick:
        st.shares += L * (s - sqrt_ratio(new_tick))
        st.tick = new_tick
        st.liquidity = L
        if on_boundary:
            st.crossings += 1
            log.debug("tick_crossed", tick=start, direction="down", liquidity=L)
    st.remaining = 0.0


def swap(
    pool: Pool,
    side: Side | str,
    amount_in: float,
    *,
    max_crossings: int | None = None,
) -> SwapResult:
    """Spend amount_in buying `side` shares; updates pool.tick and pool.liquidity in place.

    The pool is only written once the walk completes, so an InvariantViolation
    leaves it untouched. If liquidity runs out (or max_crossings boundaries have
    been crossed) before amount_in is spent, the filled part is applied and the
    result has filled=False.
    """
    side = _coerce_side(side)
    amount = check_amount(amount_in, "amount_in", minimum=None)
    if max_crossings is not None and max_crossings < 0:
        raise DomainError(f"max_crossings must be >= 0, got {max_crossings}")

    tick_before = pool.tick
    st = _SwapState(pool.tick, pool.liquidity, amount)
    step = _step_up if side is Side.YES else _step_down
    while st.remaining > 0 and not st.exhausted:
        step(pool, st, max_crossings)
        if 0 < st.remaining <= _AMOUNT_RESIDUE * amount:
            st.remaining = 0.0

    pool.tick = st.tick
    pool.liquidity = st.liquidity
    filled = st.remaining <= 0
    result = SwapResult(
        side=side,
        amount_in=amount,
        amount_used=amount - st.remaining,
        shares_out=st.shares,
        tick_before=tick_before,
        tick_after=st.tick,
        prob_before=prob_of(tick_before),
        prob_after=prob_of(st.tick),
        crossings=st.crossings,
        filled=filled,
    )
    if not filled:
        log.info(
            "swap_partial_fill",
            side=side.value,
            amount_in=amount,
            amount_used=result.amount_used,
            tick=st.tick,
            liquidity=st.liquidity,
        )
    return result


def quote_swap(
    pool: Pool,
    side: Side | str,
    amount_in: float,
    *,
    max_crossings: int | None = None,
) -> SwapResult:
    """Result swap() would return, computed on a copy; the pool is not modified."""
    return swap(pool.copy(), side, amount_in, max_crossings=max_crossings)
