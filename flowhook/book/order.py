"""Resting limit order representation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from flowhook.errors import InvalidPrice, InvalidQuantity
from flowhook.math.price import quote_for_base
from flowhook.models.types import normalize_address


class Side(str, Enum):
    """Which side of the book an order rests on.

    BUY orders (bids) pay quote for base; SELL orders (asks) deliver base
    for quote.
    """

    BUY = "buy"
    SELL = "sell"

    @property
    def opposite(self) -> Side:
        return Side.SELL if self is Side.BUY else Side.BUY


@dataclass
class Order:
    """A limit order resting in a pool's book.

    Attributes:
        id: Sequence number unique within the book
        owner: Address allowed to cancel the order
        side: BUY (bid) or SELL (ask)
        limit_price: Quote per base, scaled by PRICE_SCALE
        original_quantity: Base quantity at placement
        remaining_quantity: Base quantity still available to fill
        insertion_sequence: Monotonic counter used for time priority
    """

    id: int
    owner: str
    side: Side
    limit_price: int
    original_quantity: int
    remaining_quantity: int
    insertion_sequence: int

    def __post_init__(self) -> None:
        """Validate price and quantity, normalize the owner address."""
        if self.limit_price <= 0:
            raise InvalidPrice(f"limit_price must be positive, got {self.limit_price}")
        if self.original_quantity <= 0:
            raise InvalidQuantity(
                f"original_quantity must be positive, got {self.original_quantity}"
            )
        if not 0 < self.remaining_quantity <= self.original_quantity:
            raise InvalidQuantity(
                f"remaining_quantity must be in (0, {self.original_quantity}], "
                f"got {self.remaining_quantity}"
            )
        self.owner = normalize_address(self.owner)

    @property
    def is_bid(self) -> bool:
        return self.side is Side.BUY

    @property
    def filled_quantity(self) -> int:
        return self.original_quantity - self.remaining_quantity

    @property
    def locked_amount(self) -> int:
        """Amount the owner has committed to the remaining quantity.

        Bids lock quote (rounded up), asks lock base.
        """
        if self.is_bid:
            return quote_for_base(self.remaining_quantity, self.limit_price, round_up=True)
        return self.remaining_quantity


__all__ = ["Side", "Order"]
