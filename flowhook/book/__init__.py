"""Order book package.

Provides the per-pool OrderBook, its Order type, and a depth view.
"""

from .depth import DepthLevel, DepthSnapshot, depth_snapshot
from .order import Order, Side
from .order_book import OrderBook

__all__ = [
    "Order",
    "Side",
    "OrderBook",
    "DepthLevel",
    "DepthSnapshot",
    "depth_snapshot",
]
