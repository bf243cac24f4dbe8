"""Challenge pricing - a peer-to-peer wager at the creator's probability, settled into a CPMM pool.

The creator stakes `amount` on their outcome at probability q; the acceptor stakes
the same amount on the other side. Each receives shares paying out 1 per share:
creator amount / q, acceptor amount / (1 - q). Both share sets are added to the
pool. Balances, bet records and notifications belong to the host transaction.
"""

from __future__ import annotations

import structlog

from predswap.amm.cpmm import add_to_pool, cpmm_probability
from predswap.amm.liquidity import check_amount
from predswap.errors import DomainError
from predswap.models.challenge import ChallengeFill, CpmmPool
from predswap.models.quote import Side

log = structlog.get_logger(__name__)


def price_challenge(
    pool: CpmmPool,
    amount: float,
    creators_outcome: Side | str,
    creators_outcome_prob: float,
) -> ChallengeFill:
    stake = check_amount(amount, "amount")
    try:
        creator_side = Side(creators_outcome)
    except ValueError:
        raise DomainError(f"creators_outcome must be YES or NO, got {creators_outcome!r}") from None
    q = check_amount(creators_outcome_prob, "creators_outcome_prob", minimum=None)
    if not 0.0 < q < 1.0:
        raise DomainError(f"creators_outcome_prob must be in (0, 1), got {creators_outcome_prob!r}")

    acceptor_shares = stake / (1 - q)
    creator_shares = stake / q
    if creator_side is Side.YES:
        new_yes, new_no = creator_shares, acceptor_shares
    else:
        new_yes, new_no = acceptor_shares, creator_shares
    pool_after = add_to_pool(pool, new_yes, new_no)
    fill = ChallengeFill(
        amount=stake,
        creators_outcome=creator_side.value,
        acceptors_outcome=creator_side.opposite.value,
        creator_shares=creator_shares,
        acceptor_shares=acceptor_shares,
        pool_before=pool,
        pool_after=pool_after,
        prob_before=cpmm_probability(pool),
        prob_after=cpmm_probability(pool_after),
    )
    log.debug(
        "challenge_priced",
        amount=stake,
        creators_outcome=fill.creators_outcome,
        prob_before=fill.prob_before,
        prob_after=fill.prob_after,
    )
    return fill
