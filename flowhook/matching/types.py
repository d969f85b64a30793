"""Data types for book matching.

SwapRequest describes what a taker wants from the book; MatchResult is
what the engine hands back. Both live only for the duration of one
callback.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from flowhook.book.order import Side
from flowhook.errors import InvalidPrice, InvalidQuantity
from flowhook.models.pool import BeforeSwapDelta


@dataclass(frozen=True)
class SwapRequest:
    """An incoming swap as seen by the book.

    Attributes:
        direction: Taker side. BUY takes base out of the book (matches
            asks), SELL puts base into it (matches bids).
        amount_specified: Positive for exact-input, negative for exact-output
        price_limit: Worst book price the taker accepts (PRICE_SCALE), or
            None. Zero is a real limit: a buy at zero accepts no ask.
        specifies_quote: True when amount_specified is denominated in the
            quote token; otherwise it is a base quantity
    """

    direction: Side
    amount_specified: int
    price_limit: int | None = None
    specifies_quote: bool = False

    def __post_init__(self) -> None:
        if self.amount_specified == 0:
            raise InvalidQuantity("amount_specified must be non-zero")
        if self.price_limit is not None and self.price_limit < 0:
            raise InvalidPrice(f"price_limit must be non-negative, got {self.price_limit}")

    @property
    def is_exact_input(self) -> bool:
        return self.amount_specified > 0

    @property
    def amount(self) -> int:
        """Unsigned size of the request in its specified unit."""
        return abs(self.amount_specified)

    def accepts(self, price: int) -> bool:
        """Whether a resting order at price satisfies the taker's limit."""
        if self.price_limit is None:
            return True
        if self.direction is Side.BUY:
            return price <= self.price_limit
        return price >= self.price_limit


@dataclass(frozen=True)
class Fill:
    """One resting order (partially) consumed by a match.

    Attributes:
        order_id: The resting order
        owner: Its owner
        price: The resting order's own limit price (execution price)
        quantity: Base quantity taken from the order
        quote_amount: Quote exchanged for that quantity
        order_remaining: What is left resting after the fill
    """

    order_id: int
    owner: str
    price: int
    quantity: int
    quote_amount: int
    order_remaining: int


@dataclass
class MatchResult:
    """Outcome of matching one request against a book.

    Attributes:
        filled_quantity: Total base quantity filled
        average_price: notional * PRICE_SCALE // filled, or NO_FILL_PRICE
        notional: Total quote exchanged
        remaining_unmatched_amount: Part of the request left for the AMM,
            in the request's specified unit
        delta: Specified/unspecified adjustment against the AMM leg
        fills: Per-order fills in execution order
        levels_consumed: Distinct price levels touched
        depth_capped: True if matching stopped at the level cap
    """

    filled_quantity: int
    average_price: int
    notional: int
    remaining_unmatched_amount: int
    delta: BeforeSwapDelta
    fills: list[Fill] = field(default_factory=list)
    levels_consumed: int = 0
    depth_capped: bool = False

    @property
    def has_fill(self) -> bool:
        return self.filled_quantity > 0

    @property
    def matched_specified(self) -> int:
        """Unsigned amount of the specified unit absorbed by the book."""
        return abs(self.delta.specified)


__all__ = ["SwapRequest", "Fill", "MatchResult"]
