"""Codec subcommand: tick, prob."""

from __future__ import annotations

import typer

from predswap.amm.codec import prob_of, tick_of
from predswap.errors import DomainError

app = typer.Typer(help="Convert between probabilities and ticks")


@app.command("tick")
def tick(prob: float = typer.Argument(..., help="YES probability in (0, 1)")) -> None:
    """Print the tick nearest to a probability."""
    try:
        typer.echo(str(tick_of(prob)))
    except DomainError as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(1)


@app.command("prob")
def prob(tick_index: int = typer.Argument(..., metavar="TICK", help="Tick index")) -> None:
    """Print the YES probability at a tick."""
    try:
        typer.echo(f"{prob_of(tick_index):.6f}")
    except DomainError as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(1)
