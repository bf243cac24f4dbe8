"""PredSwap - concentrated-liquidity AMM pricing core for binary prediction markets."""

__version__ = "0.1.0"
