"""Aggregated depth view of an order book.

Collapses resting orders into price levels the way a depth ladder shows
them: per-level quantity and order count plus a running cumulative total
from the top of book outward.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from flowhook.book.order import Order, Side
from flowhook.book.order_book import OrderBook


@dataclass
class DepthLevel:
    """All resting orders at one price on one side."""

    price: int
    quantity: int = 0
    order_count: int = 0
    total: int = 0  # Cumulative quantity from best price to this level
    orders: list[Order] = field(default_factory=list)


@dataclass
class DepthSnapshot:
    """Price-level view of both sides.

    Attributes:
        bids: Levels by descending price
        asks: Levels by ascending price
        spread: best ask - best bid, 0 if either side is empty
        mid_price: (best ask + best bid) // 2, 0 if either side is empty
    """

    bids: list[DepthLevel]
    asks: list[DepthLevel]
    spread: int
    mid_price: int


def _aggregate(orders: list[Order], max_levels: int | None) -> list[DepthLevel]:
    levels: list[DepthLevel] = []
    cumulative = 0
    for order in orders:
        if not levels or levels[-1].price != order.limit_price:
            if max_levels is not None and len(levels) == max_levels:
                break
            levels.append(DepthLevel(price=order.limit_price))
        level = levels[-1]
        level.quantity += order.remaining_quantity
        level.order_count += 1
        level.orders.append(order)
        cumulative += order.remaining_quantity
        level.total = cumulative
    return levels


def depth_snapshot(book: OrderBook, max_levels: int | None = None) -> DepthSnapshot:
    """Build a depth snapshot of the book.

    Args:
        book: Book to summarize
        max_levels: Optional cap on price levels per side

    Returns:
        DepthSnapshot with levels in priority order
    """
    bids = _aggregate(book.orders(Side.BUY), max_levels)
    asks = _aggregate(book.orders(Side.SELL), max_levels)

    spread = 0
    mid_price = 0
    if bids and asks:
        best_bid = bids[0].price
        best_ask = asks[0].price
        spread = best_ask - best_bid
        mid_price = (best_ask + best_bid) // 2

    return DepthSnapshot(bids=bids, asks=asks, spread=spread, mid_price=mid_price)


__all__ = ["DepthLevel", "DepthSnapshot", "depth_snapshot"]
