"""Error taxonomy for the pricing core."""

from __future__ import annotations


class Swap3Error(Exception):
    """Base for all pricing-core errors."""


class DomainError(Swap3Error, ValueError):
    """Invalid argument (probability out of range, bad tick range, negative amount)."""


class EmptyPoolError(DomainError):
    """Price queried on a pool with no active liquidity."""


class InvariantViolation(Swap3Error):
    """Ledger or pool state is inconsistent. The pool must not be persisted."""
