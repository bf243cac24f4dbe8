"""Pool subcommand: init, show, quote, add, remove, swap - on a JSON pool snapshot file."""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import structlog
import typer
from pydantic import ValidationError

from predswap.amm.codec import tick_of
from predswap.amm.liquidity import close_position, open_position, quote_liquidity
from predswap.amm.pool import (
    Pool,
    from_snapshot,
    liquidity_profile,
    no_shares,
    probability_of,
    to_snapshot,
    yes_shares,
)
from predswap.amm.swap import swap as run_swap
from predswap.errors import DomainError, EmptyPoolError, Swap3Error
from predswap.models.pool import PoolSnapshot

log = structlog.get_logger(__name__)

app = typer.Typer(help="Inspect and trade against a Swap3 pool stored as JSON")


def _fail(message: str) -> NoReturn:
    typer.echo(f"Error: {message}")
    raise typer.Exit(1)


def _load(path: Path) -> Pool:
    if not path.exists():
        _fail(f"pool file not found: {path}")
    try:
        return from_snapshot(PoolSnapshot.model_validate_json(path.read_text()))
    except (ValidationError, Swap3Error) as e:
        _fail(f"invalid pool file {path}: {e}")


def _save(pool: Pool, path: Path) -> None:
    path.write_text(to_snapshot(pool).model_dump_json(indent=2))
    log.debug("pool_saved", path=str(path), tick=pool.tick, liquidity=pool.liquidity)


def _range(lower_prob: float, upper_prob: float) -> tuple[int, int]:
    return tick_of(lower_prob), tick_of(upper_prob)


def _echo_pool(pool: Pool) -> None:
    typer.echo(f"Liquidity: {pool.liquidity:.4f}  Tick: {pool.tick}")
    try:
        typer.echo(f"Pool YES: {yes_shares(pool):.2f}  Pool NO: {no_shares(pool):.2f}")
        typer.echo(f"Implied: {probability_of(pool):.2%}")
    except EmptyPoolError:
        typer.echo("Implied: n/a (no active liquidity)")


@app.command("init")
def init(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Pool file to create"),
    prob: float | None = typer.Option(None, "--prob", help="Starting YES probability"),
    liquidity: float | None = typer.Option(None, "--liquidity", "-l", help="Seed liquidity"),
    lower_prob: float = typer.Option(0.01, "--lower-prob", help="Seed position lower bound"),
    upper_prob: float = typer.Option(0.99, "--upper-prob", help="Seed position upper bound"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Create a pool seeded with one liquidity position."""
    settings = ctx.obj["settings"]
    if path.exists() and not force:
        _fail(f"{path} exists (use --force to overwrite)")
    try:
        pool = Pool(tick=tick_of(settings.default_prob if prob is None else prob))
        lower, upper = _range(lower_prob, upper_prob)
        quote = open_position(pool, lower, upper, settings.default_liquidity if liquidity is None else liquidity)
    except DomainError as e:
        _fail(str(e))
    _save(pool, path)
    typer.echo(f"Created {path}")
    typer.echo(f"Seed cost: YES {quote.required_yes:.4f}  NO {quote.required_no:.4f}")
    _echo_pool(pool)


@app.command("show")
def show(
    path: Path = typer.Argument(..., help="Pool file"),
    graph: bool = typer.Option(False, "--graph", help="Also print the liquidity step profile"),
) -> None:
    """Print liquidity, tick, implied reserves and probability."""
    pool = _load(path)
    _echo_pool(pool)
    typer.echo(f"Boundaries: {len(pool.ledger)}")
    if graph:
        for p, level in liquidity_profile(pool):
            typer.echo(f"  {p:.4f}  {level:.4f}")


@app.command("quote")
def quote(
    path: Path = typer.Argument(..., help="Pool file"),
    lower_prob: float = typer.Option(..., "--lower-prob", help="Position lower bound"),
    upper_prob: float = typer.Option(..., "--upper-prob", help="Position upper bound"),
    delta: float = typer.Option(..., "--delta", "-d", help="Liquidity to add"),
) -> None:
    """Print YES/NO shares required to add liquidity over a probability range."""
    pool = _load(path)
    try:
        lower, upper = _range(lower_prob, upper_prob)
        q = quote_liquidity(pool, lower, upper, delta)
    except DomainError as e:
        _fail(str(e))
    typer.echo(f"Min Tick: {q.tick_lower}  Max Tick: {q.tick_upper}")
    typer.echo(f"Y required: {q.required_yes:.4f}  N required: {q.required_no:.4f}")


@app.command("add")
def add(
    path: Path = typer.Argument(..., help="Pool file"),
    lower_prob: float = typer.Option(..., "--lower-prob", help="Position lower bound"),
    upper_prob: float = typer.Option(..., "--upper-prob", help="Position upper bound"),
    delta: float = typer.Option(..., "--delta", "-d", help="Liquidity to add"),
) -> None:
    """Open a liquidity position and rewrite the pool file."""
    pool = _load(path)
    try:
        lower, upper = _range(lower_prob, upper_prob)
        q = open_position(pool, lower, upper, delta)
    except Swap3Error as e:
        _fail(str(e))
    _save(pool, path)
    typer.echo(f"Added {q.delta_liquidity:.4f} over [{q.tick_lower}, {q.tick_upper}]")
    typer.echo(f"Paid: YES {q.required_yes:.4f}  NO {q.required_no:.4f}")
    _echo_pool(pool)


@app.command("remove")
def remove(
    path: Path = typer.Argument(..., help="Pool file"),
    lower_prob: float = typer.Option(..., "--lower-prob", help="Position lower bound"),
    upper_prob: float = typer.Option(..., "--upper-prob", help="Position upper bound"),
    delta: float = typer.Option(..., "--delta", "-d", help="Liquidity to remove"),
) -> None:
    """Close (part of) a liquidity position and rewrite the pool file."""
    pool = _load(path)
    try:
        lower, upper = _range(lower_prob, upper_prob)
        q = close_position(pool, lower, upper, delta)
    except Swap3Error as e:
        _fail(str(e))
    _save(pool, path)
    typer.echo(f"Removed {q.delta_liquidity:.4f} over [{q.tick_lower}, {q.tick_upper}]")
    typer.echo(f"Refund: YES {q.required_yes:.4f}  NO {q.required_no:.4f}")
    _echo_pool(pool)


@app.command("swap")
def swap(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Pool file"),
    side: str = typer.Option(..., "--side", "-s", help="Outcome to buy: YES or NO"),
    amount: float = typer.Option(..., "--amount", "-a", help="Currency to spend"),
    allow_partial: bool = typer.Option(
        False, "--allow-partial/--no-allow-partial", help="Keep a partial fill instead of discarding it"
    ),
) -> None:
    """Buy YES or NO shares and rewrite the pool file."""
    settings = ctx.obj["settings"]
    pool = _load(path)
    try:
        result = run_swap(pool, side.upper(), amount, max_crossings=settings.max_crossings)
    except Swap3Error as e:
        _fail(str(e))
    typer.echo(f"Bought {result.shares_out:.4f} {result.side.value} for {result.amount_used:.4f}")
    typer.echo(f"Probability: {result.prob_before:.2%} -> {result.prob_after:.2%}")
    if not result.filled:
        typer.echo(f"Partial fill: {result.amount_unused:.4f} unspent (insufficient liquidity or crossing limit)")
        if not allow_partial:
            typer.echo("Pool file not updated (pass --allow-partial to keep the partial fill)")
            raise typer.Exit(1)
    _save(pool, path)
