"""Swap3 pricing core - codec, tick ledger, pool, provisioning, swaps."""

from predswap.amm.codec import MAX_TICK, MIN_TICK, TICK_EPSILON, prob_of, tick_of
from predswap.amm.ledger import TickBoundaryState, TickLedger
from predswap.amm.liquidity import (
    close_position,
    liquidity_for_amounts,
    open_position,
    quote_liquidity,
    quote_withdrawal,
)
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
from predswap.amm.swap import quote_swap, swap

__all__ = [
    "MAX_TICK",
    "MIN_TICK",
    "TICK_EPSILON",
    "tick_of",
    "prob_of",
    "TickLedger",
    "TickBoundaryState",
    "Pool",
    "yes_shares",
    "no_shares",
    "probability_of",
    "check_pool",
    "liquidity_profile",
    "to_snapshot",
    "from_snapshot",
    "quote_liquidity",
    "quote_withdrawal",
    "liquidity_for_amounts",
    "open_position",
    "close_position",
    "swap",
    "quote_swap",
]
