"""Liquidity provisioning - cost of a position over a tick range, and committing it to the pool.

A position of liquidity dL over [lower, upper] holds, at sqrt ratio s:
  YES = dL * (1/max(s, sa) - 1/sb)   while s < sb
  NO  = dL * (min(s, sb) - sa)       while s > sa
so a range above the price is funded only in YES, a range below only in NO.
"""

from __future__ import annotations

import math

import structlog

from predswap.amm.codec import check_tick, sqrt_ratio
from predswap.amm.ledger import LIQUIDITY_DUST, dust
from predswap.amm.pool import Pool
from predswap.errors import DomainError, InvariantViolation
from predswap.models.quote import LiquidityQuote

log = structlog.get_logger(__name__)


def _check_range(tick_lower: int, tick_upper: int) -> tuple[int, int]:
    lower, upper = check_tick(tick_lower), check_tick(tick_upper)
    if lower >= upper:
        raise DomainError(f"tick_lower ({lower}) must be below tick_upper ({upper})")
    return lower, upper


def check_amount(value: float, name: str, minimum: float | None = LIQUIDITY_DUST) -> float:
    """Finite, non-negative number; strictly above minimum unless minimum is None."""
    if isinstance(value, bool):
        raise DomainError(f"{name} must be a number, got {value!r}")
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise DomainError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(v):
        raise DomainError(f"{name} must be finite, got {value!r}")
    if v < 0 or (minimum is not None and v <= minimum):
        raise DomainError(f"{name} must be positive, got {value!r}")
    return v


def _amounts(tick: int, lower: int, upper: int, delta_l: float) -> tuple[float, float]:
    sa, sb = sqrt_ratio(lower), sqrt_ratio(upper)
    if tick <= lower:
        return delta_l * (1.0 / sa - 1.0 / sb), 0.0
    if tick >= upper:
        return 0.0, delta_l * (sb - sa)
    sc = sqrt_ratio(tick)
    return delta_l * (1.0 / sc - 1.0 / sb), delta_l * (sc - sa)


def quote_liquidity(pool: Pool, tick_lower: int, tick_upper: int, delta_l: float) -> LiquidityQuote:
    """YES and NO shares required to add delta_l liquidity over [tick_lower, tick_upper]."""
    lower, upper = _check_range(tick_lower, tick_upper)
    delta = check_amount(delta_l, "delta_l")
    required_yes, required_no = _amounts(pool.tick, lower, upper, delta)
    return LiquidityQuote(
        tick_lower=lower,
        tick_upper=upper,
        delta_liquidity=delta,
        required_yes=required_yes,
        required_no=required_no,
    )


def quote_withdrawal(pool: Pool, tick_lower: int, tick_upper: int, delta_l: float) -> LiquidityQuote:
    """YES and NO shares refunded for removing delta_l liquidity over [tick_lower, tick_upper]."""
    return quote_liquidity(pool, tick_lower, tick_upper, delta_l)


def liquidity_for_amounts(
    pool: Pool, tick_lower: int, tick_upper: int, yes_amount: float, no_amount: float
) -> float:
    """Largest liquidity over the range that yes_amount and no_amount can fund at the current tick."""
    lower, upper = _check_range(tick_lower, tick_upper)
    yes = check_amount(yes_amount, "yes_amount", minimum=None)
    no = check_amount(no_amount, "no_amount", minimum=None)
    sa, sb = sqrt_ratio(lower), sqrt_ratio(upper)
    if pool.tick <= lower:
        return yes / (1.0 / sa - 1.0 / sb)
    if pool.tick >= upper:
        return no / (sb - sa)
    sc = sqrt_ratio(pool.tick)
    return min(yes / (1.0 / sc - 1.0 / sb), no / (sc - sa))


def _in_range(pool: Pool, lower: int, upper: int) -> bool:
    return lower <= pool.tick < upper


def open_position(pool: Pool, tick_lower: int, tick_upper: int, delta_l: float) -> LiquidityQuote:
    """Add delta_l liquidity over the range. Returns the cost, quoted before the pool changes."""
    quote = quote_liquidity(pool, tick_lower, tick_upper, delta_l)
    lower, upper, delta = quote.tick_lower, quote.tick_upper, quote.delta_liquidity
    pool.ledger.update(lower, delta, upper=False)
    pool.ledger.update(upper, delta, upper=True)
    if _in_range(pool, lower, upper):
        pool.liquidity += delta
    log.debug(
        "position_opened",
        tick_lower=lower,
        tick_upper=upper,
        delta_l=delta,
        required_yes=quote.required_yes,
        required_no=quote.required_no,
        liquidity=pool.liquidity,
    )
    return quote


def close_position(pool: Pool, tick_lower: int, tick_upper: int, delta_l: float) -> LiquidityQuote:
    """Remove delta_l liquidity over the range. Returns the refund, quoted before the pool changes."""
    quote = quote_withdrawal(pool, tick_lower, tick_upper, delta_l)
    lower, upper, delta = quote.tick_lower, quote.tick_upper, quote.delta_liquidity
    for t in (lower, upper):
        state = pool.ledger.get(t)
        held = state.liquidity_gross if state else 0.0
        if held + dust(delta) < delta:
            raise DomainError(f"tick {t} holds {held} liquidity, cannot withdraw {delta}")
    new_liquidity = pool.liquidity
    if _in_range(pool, lower, upper):
        new_liquidity -= delta
        if new_liquidity < -dust(pool.liquidity):
            raise InvariantViolation(
                f"withdrawing {delta} leaves negative active liquidity {new_liquidity} at tick {pool.tick}"
            )
        if new_liquidity <= dust(pool.liquidity):
            new_liquidity = 0.0
    pool.ledger.update(lower, -delta, upper=False)
    pool.ledger.update(upper, -delta, upper=True)
    pool.liquidity = new_liquidity
    log.debug(
        "position_closed",
        tick_lower=lower,
        tick_upper=upper,
        delta_l=delta,
        refund_yes=quote.required_yes,
        refund_no=quote.required_no,
        liquidity=pool.liquidity,
    )
    return quote
