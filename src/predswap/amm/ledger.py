"""Tick ledger - sparse ordered map of tick boundaries with per-boundary liquidity."""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from typing import Iterator

from predswap.errors import DomainError, InvariantViolation

# Liquidity below this magnitude is treated as zero (float residue after add/remove).
LIQUIDITY_DUST = 1e-9
# Relative rounding error tolerated when values of a given magnitude cancel.
RESIDUE_RATIO = 1e-12


def dust(scale: float = 1.0) -> float:
    """Tolerance for the residue left when liquidity of magnitude `scale` cancels out.

    Scale by the value being cancelled (what a boundary or the pool held), never
    by the size of the change alone.
    """
    return max(LIQUIDITY_DUST, RESIDUE_RATIO * abs(scale))


@dataclass
class TickBoundaryState:
    """Liquidity bookkeeping at one tick boundary."""

    liquidity_net: float = 0.0  # applied to active liquidity when crossing upward
    liquidity_gross: float = 0.0  # total liquidity referencing this tick


class TickLedger:
    """Only ticks that bound at least one position are stored.

    Ticks are kept in a sorted list for next-boundary lookups by binary search,
    with states in a dict keyed by tick.
    """

    __slots__ = ("_ticks", "_states")

    def __init__(self) -> None:
        self._ticks: list[int] = []
        self._states: dict[int, TickBoundaryState] = {}

    def __len__(self) -> int:
        return len(self._ticks)

    def __contains__(self, tick: object) -> bool:
        return tick in self._states

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._ticks))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TickLedger):
            return NotImplemented
        return self._states == other._states

    def __repr__(self) -> str:
        return f"TickLedger({self.items()!r})"

    def get(self, tick: int) -> TickBoundaryState | None:
        state = self._states.get(tick)
        if state is None:
            return None
        return TickBoundaryState(state.liquidity_net, state.liquidity_gross)

    def net_at(self, tick: int) -> float:
        state = self._states.get(tick)
        return state.liquidity_net if state else 0.0

    def items(self) -> list[tuple[int, TickBoundaryState]]:
        """(tick, state) pairs in ascending tick order."""
        return [(t, self.get(t)) for t in self._ticks]  # type: ignore[misc]

    def update(self, tick: int, delta: float, upper: bool) -> None:
        """Add delta liquidity at tick, as the lower (upper=False) or upper bound of a range.

        A negative delta withdraws. Raises DomainError if more gross liquidity is
        withdrawn than the boundary holds; the entry is pruned when gross reaches zero.
        """
        state = self._states.get(tick)
        held = state.liquidity_gross if state else 0.0
        gross = held + delta
        tol = dust(max(held, abs(delta)))
        if gross < -tol:
            raise DomainError(f"tick {tick} holds less liquidity than the {-delta} being withdrawn")
        if gross <= tol:
            if state is not None:
                del self._states[tick]
                self._ticks.pop(bisect.bisect_left(self._ticks, tick))
            return
        if state is None:
            state = TickBoundaryState()
            self._states[tick] = state
            bisect.insort(self._ticks, tick)
        state.liquidity_gross = gross
        state.liquidity_net += -delta if upper else delta

    def restore(self, tick: int, liquidity_net: float, liquidity_gross: float) -> None:
        """Set a boundary's state directly (loading a snapshot)."""
        if liquidity_gross <= LIQUIDITY_DUST:
            raise DomainError(f"tick {tick} restored with non-positive gross liquidity")
        if abs(liquidity_net) > liquidity_gross * (1 + LIQUIDITY_DUST):
            raise InvariantViolation(f"tick {tick} has |net| {liquidity_net} above gross {liquidity_gross}")
        if tick not in self._states:
            bisect.insort(self._ticks, tick)
        self._states[tick] = TickBoundaryState(liquidity_net, liquidity_gross)

    def next_above(self, tick: int) -> int | None:
        """Lowest boundary strictly above tick."""
        i = bisect.bisect_right(self._ticks, tick)
        return self._ticks[i] if i < len(self._ticks) else None

    def next_below(self, tick: int) -> int | None:
        """Highest boundary strictly below tick."""
        i = bisect.bisect_left(self._ticks, tick)
        return self._ticks[i - 1] if i > 0 else None

    def lowest(self) -> int | None:
        return self._ticks[0] if self._ticks else None

    def highest(self) -> int | None:
        return self._ticks[-1] if self._ticks else None

    def net_sum(self) -> float:
        return sum(s.liquidity_net for s in self._states.values())

    def active_liquidity_at(self, tick: int) -> float:
        """Sum of liquidity_net over boundaries at or below tick."""
        i = bisect.bisect_right(self._ticks, tick)
        return sum(self._states[t].liquidity_net for t in self._ticks[:i])

    def max_gross(self) -> float:
        return max((s.liquidity_gross for s in self._states.values()), default=0.0)

    def check(self) -> None:
        """Raise InvariantViolation if the net liquidity over all boundaries is not zero."""
        total = self.net_sum()
        if abs(total) > dust(self.max_gross()):
            raise InvariantViolation(f"ledger liquidity_net sums to {total}, expected 0")

    def copy(self) -> TickLedger:
        other = TickLedger()
        other._ticks = list(self._ticks)
        other._states = {
            t: TickBoundaryState(s.liquidity_net, s.liquidity_gross) for t, s in self._states.items()
        }
        return other
