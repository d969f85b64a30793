"""Callback interface a pool manager drives.

A hook implements six lifecycle callbacks. Each returns an
acknowledgement selector identifying the callback, plus whatever extra
outputs that callback defines.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from flowhook.models.pool import (
    BalanceDelta,
    BeforeSwapDelta,
    ModifyLiquidityParams,
    PoolKey,
    SwapParams,
)

_POOL_KEY = "(address,address,uint24,int24,address)"


class HookSelector(str, Enum):
    """Acknowledgement returned by each callback (its ABI signature)."""

    BEFORE_INITIALIZE = f"beforeInitialize(address,{_POOL_KEY},uint160)"
    AFTER_INITIALIZE = f"afterInitialize(address,{_POOL_KEY},uint160,int24)"
    BEFORE_SWAP = f"beforeSwap(address,{_POOL_KEY},(bool,int256,uint160),bytes)"
    AFTER_SWAP = f"afterSwap(address,{_POOL_KEY},(bool,int256,uint160),int256,bytes)"
    BEFORE_MODIFY_LIQUIDITY = (
        f"beforeModifyLiquidity(address,{_POOL_KEY},(int24,int24,int256,bytes32),bytes)"
    )
    AFTER_MODIFY_LIQUIDITY = (
        f"afterModifyLiquidity(address,{_POOL_KEY},(int24,int24,int256,bytes32),int256,bytes)"
    )


@dataclass(frozen=True)
class HookPermissions:
    """Which callbacks a hook implements and which may return deltas."""

    before_initialize: bool = False
    after_initialize: bool = False
    before_swap: bool = False
    after_swap: bool = False
    before_modify_liquidity: bool = False
    after_modify_liquidity: bool = False
    before_swap_returns_delta: bool = False
    after_swap_returns_delta: bool = False
    after_modify_liquidity_returns_delta: bool = False


@runtime_checkable
class Hooks(Protocol):
    """The six lifecycle callbacks."""

    def before_initialize(self, sender: str, key: PoolKey, sqrt_price_x96: int) -> HookSelector:
        ...

    def after_initialize(
        self, sender: str, key: PoolKey, sqrt_price_x96: int, tick: int
    ) -> HookSelector:
        ...

    def before_swap(
        self, sender: str, key: PoolKey, params: SwapParams, hook_data: bytes = b""
    ) -> tuple[HookSelector, BeforeSwapDelta, int]:
        ...

    def after_swap(
        self,
        sender: str,
        key: PoolKey,
        params: SwapParams,
        delta: BalanceDelta,
        hook_data: bytes = b"",
    ) -> tuple[HookSelector, int]:
        ...

    def before_modify_liquidity(
        self,
        sender: str,
        key: PoolKey,
        params: ModifyLiquidityParams,
        hook_data: bytes = b"",
    ) -> HookSelector:
        ...

    def after_modify_liquidity(
        self,
        sender: str,
        key: PoolKey,
        params: ModifyLiquidityParams,
        delta: BalanceDelta,
        hook_data: bytes = b"",
    ) -> tuple[HookSelector, BalanceDelta]:
        ...


__all__ = ["HookSelector", "HookPermissions", "Hooks"]
