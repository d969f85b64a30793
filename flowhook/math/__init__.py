"""Fixed-point price utilities for the order-book hook.

This package provides conversions between pool sqrt prices and
PRICE_SCALE book prices, plus the rounding-aware quote/base conversions
used during matching.
"""

from flowhook.math.price import (
    average_price,
    base_for_quote,
    price_to_sqrt_price_x96,
    quote_for_base,
    sqrt_price_x96_to_price,
)

__all__ = [
    "average_price",
    "base_for_quote",
    "price_to_sqrt_price_x96",
    "quote_for_base",
    "sqrt_price_x96_to_price",
]
