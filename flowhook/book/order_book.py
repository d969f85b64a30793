"""Price-time priority order book for a single pool.

Bids are kept in descending price order and asks in ascending price order;
within a price, earlier insertion sequence wins. Both sides are
sortedcontainers.SortedList instances, so inserts and removals are
O(log n) and the top of book is the first element.
"""

from __future__ import annotations

from dataclasses import replace

import structlog
from sortedcontainers import SortedList

from flowhook.book.order import Order, Side
from flowhook.errors import (
    CrossedBook,
    InsufficientQuantity,
    InvalidQuantity,
    InvariantViolation,
    OrderNotFound,
    Unauthorized,
)
from flowhook.models.types import normalize_address

logger = structlog.get_logger()


def _bid_key(order: Order) -> tuple[int, int]:
    return (-order.limit_price, order.insertion_sequence)


def _ask_key(order: Order) -> tuple[int, int]:
    return (order.limit_price, order.insertion_sequence)


class OrderBook:
    """Resting orders for one pool.

    The book only enforces its own structural invariants (ordering,
    positive remaining quantity, ownership on cancel). Matching lives in
    flowhook.matching and mutates the book exclusively through consume().

    Attributes:
        pool_id: Identifier of the owning pool (used for logging)
    """

    def __init__(self, pool_id: str = "") -> None:
        self.pool_id = pool_id
        self._bids: SortedList = SortedList(key=_bid_key)
        self._asks: SortedList = SortedList(key=_ask_key)
        self._orders: dict[int, Order] = {}
        self._next_order_id = 1
        self._next_sequence = 1

    def __len__(self) -> int:
        return len(self._orders)

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._orders

    def _side(self, side: Side) -> SortedList:
        return self._bids if side is Side.BUY else self._asks

    # --- Order creation ---

    def create_order(self, owner: str, side: Side, limit_price: int, quantity: int) -> Order:
        """Build a new order with the next id and insertion sequence.

        The order is not inserted; callers match it first and rest what
        remains via insert().

        Raises:
            InvalidQuantity: If quantity is not positive
            InvalidPrice: If limit_price is not positive
        """
        order = Order(
            id=self._next_order_id,
            owner=owner,
            side=side,
            limit_price=limit_price,
            original_quantity=quantity,
            remaining_quantity=quantity,
            insertion_sequence=self._next_sequence,
        )
        self._next_order_id += 1
        self._next_sequence += 1
        return order

    # --- Mutations ---

    def insert(self, order: Order) -> None:
        """Insert an order preserving price/time ordering.

        Raises:
            InvalidQuantity: If the order has nothing left to rest
            ValueError: If an order with the same id is already resting
        """
        if order.remaining_quantity <= 0:
            raise InvalidQuantity(
                f"Order {order.id} has no remaining quantity ({order.remaining_quantity})"
            )
        if order.id in self._orders:
            raise ValueError(f"Order {order.id} already resting")

        self._side(order.side).add(order)
        self._orders[order.id] = order
        logger.debug(
            "order_inserted",
            pool_id=self.pool_id[:10],
            order_id=order.id,
            side=order.side.value,
            price=order.limit_price,
            quantity=order.remaining_quantity,
        )

    def cancel(self, order_id: int, caller: str) -> int:
        """Remove an order on behalf of its owner.

        Args:
            order_id: Order to cancel
            caller: Address requesting the cancel

        Returns:
            The quantity that was still resting

        Raises:
            OrderNotFound: If no such order rests in the book
            Unauthorized: If caller is not the owner
        """
        order = self._orders.get(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        if normalize_address(caller) != order.owner:
            raise Unauthorized(order_id, caller)

        self._remove(order)
        logger.debug(
            "order_canceled",
            pool_id=self.pool_id[:10],
            order_id=order_id,
            freed=order.remaining_quantity,
        )
        return order.remaining_quantity

    def consume(self, order_id: int, quantity: int) -> int:
        """Reduce an order's remaining quantity, removing it at zero.

        Returns:
            Quantity still resting after the fill

        Raises:
            InsufficientQuantity: If quantity is not in (0, remaining]
            InvariantViolation: If the order is not in the book
        """
        order = self._orders.get(order_id)
        if order is None:
            raise InvariantViolation(f"Consume of unknown order {order_id}")
        if quantity <= 0 or quantity > order.remaining_quantity:
            raise InsufficientQuantity(order_id, quantity, order.remaining_quantity)

        order.remaining_quantity -= quantity
        if order.remaining_quantity == 0:
            self._remove(order)
        return order.remaining_quantity

    def evict_worst(self, side: Side) -> Order:
        """Remove and return the worst-priced (then newest) order on a side."""
        worst = self.worst(side)
        if worst is None:
            raise InvariantViolation(f"Cannot evict from empty {side.value} side")
        self._remove(worst)
        logger.info(
            "order_evicted",
            pool_id=self.pool_id[:10],
            order_id=worst.id,
            side=side.value,
            price=worst.limit_price,
            quantity=worst.remaining_quantity,
        )
        return worst

    def _remove(self, order: Order) -> None:
        self._side(order.side).remove(order)
        del self._orders[order.id]

    # --- Queries ---

    def get(self, order_id: int) -> Order | None:
        return self._orders.get(order_id)

    def best_bid(self) -> Order | None:
        """Highest bid (oldest first at equal price), or None."""
        return self._bids[0] if self._bids else None

    def best_ask(self) -> Order | None:
        """Lowest ask (oldest first at equal price), or None."""
        return self._asks[0] if self._asks else None

    def best(self, side: Side) -> Order | None:
        return self.best_bid() if side is Side.BUY else self.best_ask()

    def worst(self, side: Side) -> Order | None:
        orders = self._side(side)
        return orders[-1] if orders else None

    def orders(self, side: Side) -> list[Order]:
        """Orders on a side in priority order."""
        return list(self._side(side))

    def orders_for(self, owner: str) -> list[Order]:
        """Resting orders of one owner: bids then asks, each in priority order."""
        owner = normalize_address(owner)
        return [o for side in (Side.BUY, Side.SELL) for o in self._side(side) if o.owner == owner]

    def count(self, side: Side) -> int:
        return len(self._side(side))

    def total_quantity(self, side: Side | None = None) -> int:
        """Sum of remaining quantity on one side, or both when side is None."""
        if side is None:
            return sum(o.remaining_quantity for o in self._orders.values())
        return sum(o.remaining_quantity for o in self._side(side))

    def _crossed_prices(self) -> tuple[int, int] | None:
        """(best bid, best ask) prices when the book is crossed, else None."""
        bid, ask = self.best_bid(), self.best_ask()
        if bid is None or ask is None or bid.limit_price < ask.limit_price:
            return None
        return bid.limit_price, ask.limit_price

    def is_crossed(self) -> bool:
        return self._crossed_prices() is not None

    def assert_not_crossed(self) -> None:
        """Raise CrossedBook if best bid >= best ask."""
        crossed = self._crossed_prices()
        if crossed is not None:
            raise CrossedBook(*crossed)

    def fingerprint(self) -> tuple[int, int, int, int]:
        """(bid count, ask count, bid quantity, ask quantity)."""
        return (
            len(self._bids),
            len(self._asks),
            self.total_quantity(Side.BUY),
            self.total_quantity(Side.SELL),
        )

    # --- Snapshots ---

    def copy(self) -> OrderBook:
        """Independent copy of the book, including id/sequence counters."""
        clone = OrderBook(self.pool_id)
        for order in self._orders.values():
            clone_order = replace(order)
            clone._side(clone_order.side).add(clone_order)
            clone._orders[clone_order.id] = clone_order
        clone._next_order_id = self._next_order_id
        clone._next_sequence = self._next_sequence
        return clone

    def restore(self, snapshot: OrderBook) -> None:
        """Replace this book's state with a snapshot taken by copy()."""
        restored = snapshot.copy()
        self._bids = restored._bids
        self._asks = restored._asks
        self._orders = restored._orders
        self._next_order_id = restored._next_order_id
        self._next_sequence = restored._next_sequence


__all__ = ["OrderBook"]
