"""Limit-order book hook for an AMM pool manager."""

__version__ = "0.1.0"
