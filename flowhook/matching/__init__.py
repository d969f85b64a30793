"""Matching of incoming swaps against a pool's resting orders."""

from .engine import MatchingEngine
from .types import Fill, MatchResult, SwapRequest

__all__ = ["MatchingEngine", "SwapRequest", "MatchResult", "Fill"]
