"""Hook configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from flowhook.constants import DEFAULT_MAX_MATCH_LEVELS
from flowhook.fees import FeePolicy, NoFeeOverride, StaticFeeOverride


class DepthPolicy(str, Enum):
    """What to do when a side of the book is at capacity.

    REJECT: the new order fails with BookFull.
    EVICT_WORST: the worst-priced (then newest) resting order is removed to
        make room, unless the new order would itself be the worst.
    """

    REJECT = "reject"
    EVICT_WORST = "evict_worst"


@dataclass(frozen=True)
class HookConfig:
    """Centralized configuration for the order-book hook.

    Attributes:
        max_match_levels: Distinct price levels one matching pass may consume
        max_orders_per_side: Resting order cap per side; None means unbounded
        depth_policy: Behaviour when a side is at its cap
        fee_policy: LP fee override decision for beforeSwap
    """

    max_match_levels: int = DEFAULT_MAX_MATCH_LEVELS
    max_orders_per_side: int | None = None
    depth_policy: DepthPolicy = DepthPolicy.REJECT
    fee_policy: FeePolicy = field(default_factory=NoFeeOverride)

    def __post_init__(self) -> None:
        if self.max_match_levels <= 0:
            raise ValueError(f"max_match_levels must be positive, got {self.max_match_levels}")
        if self.max_orders_per_side is not None and self.max_orders_per_side <= 0:
            raise ValueError(
                f"max_orders_per_side must be positive, got {self.max_orders_per_side}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> HookConfig:
        """Build a configuration from FLOWHOOK_* environment variables.

        - FLOWHOOK_MAX_MATCH_LEVELS: int (default 32)
        - FLOWHOOK_MAX_ORDERS_PER_SIDE: int, empty for unbounded
        - FLOWHOOK_DEPTH_POLICY: "reject" or "evict_worst"
        - FLOWHOOK_OVERRIDE_FEE: LP fee in pips applied when the book fills
        """
        env = os.environ if environ is None else environ

        max_levels = int(env.get("FLOWHOOK_MAX_MATCH_LEVELS", DEFAULT_MAX_MATCH_LEVELS))
        max_orders_raw = env.get("FLOWHOOK_MAX_ORDERS_PER_SIDE", "")
        max_orders = int(max_orders_raw) if max_orders_raw else None
        depth_policy = DepthPolicy(env.get("FLOWHOOK_DEPTH_POLICY", DepthPolicy.REJECT.value))
        override_raw = env.get("FLOWHOOK_OVERRIDE_FEE", "")
        fee_policy: FeePolicy = (
            StaticFeeOverride(fee=int(override_raw)) if override_raw else NoFeeOverride()
        )

        return cls(
            max_match_levels=max_levels,
            max_orders_per_side=max_orders,
            depth_policy=depth_policy,
            fee_policy=fee_policy,
        )


# Default configuration instance
DEFAULT_HOOK_CONFIG = HookConfig()
