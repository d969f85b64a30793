"""Conversions between pool sqrt prices and book prices.

Book prices are quote (token1) per base (token0) scaled by PRICE_SCALE.
The pool expresses the same ratio as sqrt(price) in Q64.96.
"""

from __future__ import annotations

import math

from flowhook.constants import PRICE_SCALE, Q96
from flowhook.safe_int import S


def sqrt_price_x96_to_price(sqrt_price_x96: int) -> int:
    """Convert a Q64.96 sqrt price to a PRICE_SCALE price, rounding down.

    price = sqrt_price_x96^2 * PRICE_SCALE / 2^192
    """
    return S(sqrt_price_x96).mul_div(sqrt_price_x96, Q96).mul_div(PRICE_SCALE, Q96).value


def price_to_sqrt_price_x96(price: int) -> int:
    """Convert a PRICE_SCALE price to a Q64.96 sqrt price, rounding down."""
    if price < 0:
        raise ValueError(f"price must be non-negative, got {price}")
    return math.isqrt(price * Q96 * Q96 // PRICE_SCALE)


def quote_for_base(base_amount: int, price: int, *, round_up: bool) -> int:
    """Quote amount exchanged for base_amount at price."""
    if round_up:
        return S(base_amount).mul_div_up(price, PRICE_SCALE).value
    return S(base_amount).mul_div(price, PRICE_SCALE).value


def base_for_quote(quote_amount: int, price: int) -> int:
    """Largest base amount whose cost at price does not exceed quote_amount."""
    return S(quote_amount).mul_div(PRICE_SCALE, price).value


def average_price(notional: int, filled: int) -> int:
    """Volume-weighted price, rounded toward zero.

    Callers must not pass filled == 0; SafeInt raises DivisionByZero.
    """
    return S(notional).mul_div(PRICE_SCALE, filled).value


__all__ = [
    "sqrt_price_x96_to_price",
    "price_to_sqrt_price_x96",
    "quote_for_base",
    "base_for_quote",
    "average_price",
]
