"""Constant-product pool with a probability weight p - the simpler alternate pricing strategy.

Invariant: k = YES ** p * NO ** (1 - p). Implied YES probability
p * NO / ((1 - p) * YES + p * NO).
"""

from __future__ import annotations

from predswap.amm.liquidity import check_amount
from predswap.errors import DomainError, EmptyPoolError
from predswap.models.challenge import CpmmPool
from predswap.models.quote import Side


def _reserves(pool: CpmmPool) -> tuple[float, float]:
    if pool.yes <= 0 or pool.no <= 0:
        raise EmptyPoolError(f"CPMM pool needs positive reserves, got YES={pool.yes} NO={pool.no}")
    return pool.yes, pool.no


def cpmm_probability(pool: CpmmPool) -> float:
    y, n = _reserves(pool)
    p = pool.p
    return p * n / ((1 - p) * y + p * n)


def cpmm_shares(pool: CpmmPool, outcome: Side | str, amount: float) -> float:
    """Shares of `outcome` bought for `amount`, keeping k constant."""
    y, n = _reserves(pool)
    bet = check_amount(amount, "amount", minimum=None)
    p = pool.p
    k = y**p * n ** (1 - p)
    if _outcome(outcome) is Side.YES:
        return y + bet - (k * (bet + n) ** (p - 1)) ** (1 / p)
    return n + bet - (k * (bet + y) ** -p) ** (1 / (1 - p))


def buy_shares(pool: CpmmPool, outcome: Side | str, amount: float) -> tuple[float, CpmmPool]:
    """Buy `outcome` with `amount`; returns (shares, new pool). The input pool is not modified."""
    side = _outcome(outcome)
    shares = cpmm_shares(pool, side, amount)
    bet = float(amount)
    if side is Side.YES:
        new_pool = CpmmPool(yes=pool.yes + bet - shares, no=pool.no + bet, p=pool.p)
    else:
        new_pool = CpmmPool(yes=pool.yes + bet, no=pool.no + bet - shares, p=pool.p)
    return shares, new_pool


def add_to_pool(pool: CpmmPool, yes: float, no: float) -> CpmmPool:
    """New pool with extra reserves (e.g. shares minted by a matched wager)."""
    return CpmmPool(
        yes=pool.yes + check_amount(yes, "yes", minimum=None),
        no=pool.no + check_amount(no, "no", minimum=None),
        p=pool.p,
    )


def _outcome(outcome: Side | str) -> Side:
    try:
        return Side(outcome)
    except ValueError:
        raise DomainError(f"outcome must be YES or NO, got {outcome!r}") from None
