"""Pool-manager boundary types.

These mirror the structs a pool manager hands to hook callbacks: the pool
identity, swap and liquidity parameters, and the packed balance deltas the
hook returns.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from flowhook.constants import (
    ADDRESS_ZERO,
    INT128_MAX,
    INT128_MIN,
    MAX_SQRT_PRICE,
    MIN_SQRT_PRICE,
)
from flowhook.models.types import normalize_address


@dataclass(frozen=True)
class PoolKey:
    """Identity of a pool: token pair, fee tier, tick spacing and hook.

    currency0 is the base token and currency1 the quote token for every
    price the hook deals with. Addresses are stored lowercase and must be
    strictly ordered (currency0 < currency1).
    """

    currency0: str
    currency1: str
    fee: int
    tick_spacing: int = 60
    hooks: str = ADDRESS_ZERO

    def __post_init__(self) -> None:
        c0 = normalize_address(self.currency0, validate=True)
        c1 = normalize_address(self.currency1, validate=True)
        hooks = normalize_address(self.hooks, validate=True)
        if c0 >= c1:
            raise ValueError(f"currency0 must sort before currency1: {c0} >= {c1}")
        if self.fee < 0:
            raise ValueError(f"fee must be non-negative, got {self.fee}")
        if self.tick_spacing <= 0:
            raise ValueError(f"tick_spacing must be positive, got {self.tick_spacing}")
        # Frozen dataclass: write normalized values through object.__setattr__
        object.__setattr__(self, "currency0", c0)
        object.__setattr__(self, "currency1", c1)
        object.__setattr__(self, "hooks", hooks)

    @property
    def pool_id(self) -> str:
        """Stable hex identifier derived from the key fields."""
        encoded = f"{self.currency0}:{self.currency1}:{self.fee}:{self.tick_spacing}:{self.hooks}"
        return "0x" + hashlib.sha256(encoded.encode()).hexdigest()


@dataclass(frozen=True)
class SwapParams:
    """Swap parameters as passed to before/after swap.

    Attributes:
        zero_for_one: True when token0 is paid in and token1 comes out
        amount_specified: Positive for exact-input, negative for exact-output
        sqrt_price_limit_x96: Q64.96 sqrt price the AMM leg may not cross
    """

    zero_for_one: bool
    amount_specified: int
    sqrt_price_limit_x96: int = 0

    def __post_init__(self) -> None:
        if self.amount_specified == 0:
            raise ValueError("amount_specified must be non-zero")

    @property
    def is_exact_input(self) -> bool:
        return self.amount_specified > 0

    @property
    def has_price_limit(self) -> bool:
        """True unless the limit is zero or one of the "no limit" sentinels.

        Routers pass MIN_SQRT_PRICE + 1 / MAX_SQRT_PRICE - 1 to swap without
        a bound.
        """
        return MIN_SQRT_PRICE + 1 < self.sqrt_price_limit_x96 < MAX_SQRT_PRICE - 1


@dataclass(frozen=True)
class ModifyLiquidityParams:
    """Liquidity position change."""

    tick_lower: int
    tick_upper: int
    liquidity_delta: int
    salt: bytes = b"\x00" * 32


def _check_int128(name: str, value: int) -> None:
    if not INT128_MIN <= value <= INT128_MAX:
        raise ValueError(f"{name} does not fit int128: {value}")


@dataclass(frozen=True)
class BalanceDelta:
    """Per-currency balance change (amount0, amount1), each an int128."""

    amount0: int = 0
    amount1: int = 0

    def __post_init__(self) -> None:
        _check_int128("amount0", self.amount0)
        _check_int128("amount1", self.amount1)

    @classmethod
    def zero(cls) -> BalanceDelta:
        return cls(0, 0)


@dataclass(frozen=True)
class BeforeSwapDelta:
    """Delta returned from beforeSwap, in specified/unspecified terms.

    The specified leg uses the sign convention of amount_specified and holds
    the part of the swap the book absorbed; the pool prices only
    amount_specified - specified. The unspecified leg is the counter amount,
    with the opposite sign.
    """

    specified: int = 0
    unspecified: int = 0

    def __post_init__(self) -> None:
        _check_int128("specified", self.specified)
        _check_int128("unspecified", self.unspecified)

    @classmethod
    def zero(cls) -> BeforeSwapDelta:
        return cls(0, 0)

    @property
    def is_zero(self) -> bool:
        return self.specified == 0 and self.unspecified == 0


__all__ = [
    "PoolKey",
    "SwapParams",
    "ModifyLiquidityParams",
    "BalanceDelta",
    "BeforeSwapDelta",
]
