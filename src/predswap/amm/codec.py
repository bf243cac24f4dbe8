"""Tick <-> probability conversion.

A tick t maps to the ratio r = TICK_BASE ** t between the pool's NO and YES
reserves, and to the YES probability r / (1 + r). Ticks are a discretization
of that continuous curve; tick_of rounds to the nearest tick.
"""

from __future__ import annotations

import math
from numbers import Integral, Real

from predswap.errors import DomainError

TICK_BASE = 1.0001
LOG_BASE = math.log(TICK_BASE)

# Adjacent ticks stay distinct doubles: prob_of(MAX_TICK) = 1 - 2e-9.
MAX_TICK = 200_000
MIN_TICK = -MAX_TICK

# Half a tick step in probability space is at most LOG_BASE / 8 (p(1-p) <= 1/4).
TICK_EPSILON = LOG_BASE / 8


def check_tick(tick: int) -> int:
    """Validate a tick index and return it as a plain int."""
    if isinstance(tick, bool) or not isinstance(tick, Integral):
        raise DomainError(f"tick must be an integer, got {tick!r}")
    if not MIN_TICK <= tick <= MAX_TICK:
        raise DomainError(f"tick {tick} outside [{MIN_TICK}, {MAX_TICK}]")
    return int(tick)


def tick_of(prob: float) -> int:
    """Nearest tick for a YES probability strictly between 0 and 1."""
    if isinstance(prob, bool) or not isinstance(prob, Real):
        raise DomainError(f"probability must be a number, got {prob!r}")
    p = float(prob)
    if not 0.0 < p < 1.0:
        raise DomainError(f"probability must be in (0, 1), got {prob!r}")
    tick = round(math.log(p / (1.0 - p)) / LOG_BASE)
    return max(MIN_TICK, min(MAX_TICK, tick))


def prob_of(tick: int) -> float:
    """YES probability at a tick. Strictly increasing in tick.

    Defined on [MIN_TICK, MAX_TICK]; every tick tick_of can return is in range.
    Raises DomainError outside it, where adjacent ticks stop mapping to distinct floats.
    """
    x = check_tick(tick) * LOG_BASE
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    e = math.exp(x)
    return e / (1.0 + e)


def sqrt_ratio(tick: int) -> float:
    """sqrt(NO / YES) at a tick."""
    return math.exp(check_tick(tick) * LOG_BASE / 2.0)


def tick_at_sqrt_ratio(sqrt_r: float) -> float:
    """Continuous (unrounded) tick for a sqrt ratio. Inverse of sqrt_ratio."""
    if not sqrt_r > 0:
        raise DomainError(f"sqrt ratio must be positive, got {sqrt_r!r}")
    return 2.0 * math.log(sqrt_r) / LOG_BASE
