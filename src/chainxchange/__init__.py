"""ChainXchange: simulated cryptocurrency trading against live market data."""

__version__ = "0.1.0"
