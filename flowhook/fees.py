"""LP fee override policies for beforeSwap.

beforeSwap may return an LP fee override for the AMM leg. Whether book
fills should change the fee charged on the remainder is a deployment
decision, so the hook takes a policy object instead of a fixed formula.

Usage:
    from flowhook.fees import StaticFeeOverride

    config = HookConfig(fee_policy=StaticFeeOverride(fee=500))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from flowhook.constants import MAX_LP_FEE, OVERRIDE_FEE_FLAG

if TYPE_CHECKING:
    from flowhook.matching.types import MatchResult
    from flowhook.models.pool import PoolKey


class FeePolicy(Protocol):
    """Protocol for the optional LP fee override returned from beforeSwap."""

    def lp_fee_override(self, key: PoolKey, result: MatchResult) -> int:
        """Return the override value, or 0 to leave the pool fee untouched.

        Args:
            key: The pool being swapped
            result: Outcome of matching the swap against the book

        Returns:
            0 for no override, otherwise a fee in pips with
            OVERRIDE_FEE_FLAG set
        """
        ...


class NoFeeOverride:
    """Never override the pool's LP fee."""

    def lp_fee_override(self, key: PoolKey, result: MatchResult) -> int:
        _ = (key, result)
        return 0

    def __repr__(self) -> str:
        return "NoFeeOverride()"


@dataclass(frozen=True)
class StaticFeeOverride:
    """Apply a fixed LP fee to the AMM leg of swaps the book partly filled.

    Attributes:
        fee: LP fee in pips (hundredths of a basis point), at most 1_000_000
    """

    fee: int

    def __post_init__(self) -> None:
        if not 0 <= self.fee <= MAX_LP_FEE:
            raise ValueError(f"fee must be in [0, {MAX_LP_FEE}], got {self.fee}")

    def lp_fee_override(self, key: PoolKey, result: MatchResult) -> int:
        _ = key
        if not result.has_fill:
            return 0
        return self.fee | OVERRIDE_FEE_FLAG


__all__ = ["FeePolicy", "NoFeeOverride", "StaticFeeOverride"]
