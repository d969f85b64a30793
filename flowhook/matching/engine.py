"""Greedy price-time priority matching of a swap against a book.

Algorithm:
1. Take the best resting order on the side opposite the taker
2. Stop if its price does not satisfy the taker's limit
3. Fill min(remaining request, order remaining) at the order's own price
4. Repeat until the request is satisfied, the side is empty, or the
   configured number of price levels has been consumed

No better-priced eligible order is ever skipped, so the result is optimal
for the taker. Quote legs round in favour of the resting order: a taker
buying base pays the rounded-up quote, a taker selling base receives the
rounded-down quote.

All arithmetic goes through SafeInt; a negative remainder or an
over-consume raises rather than producing a silently wrong delta.
"""

from __future__ import annotations

import structlog

from flowhook.book.order import Side
from flowhook.book.order_book import OrderBook
from flowhook.constants import DEFAULT_MAX_MATCH_LEVELS, NO_FILL_PRICE
from flowhook.math.price import average_price, base_for_quote, quote_for_base
from flowhook.models.pool import BeforeSwapDelta
from flowhook.safe_int import S

from .types import Fill, MatchResult, SwapRequest

logger = structlog.get_logger()


class MatchingEngine:
    """Matches swap requests against an OrderBook.

    The engine holds no book state of its own; it mutates the book only
    through OrderBook.consume() and never inserts or cancels.

    Args:
        max_levels: Maximum distinct price levels consumed per match call
    """

    def __init__(self, max_levels: int = DEFAULT_MAX_MATCH_LEVELS) -> None:
        if max_levels <= 0:
            raise ValueError(f"max_levels must be positive, got {max_levels}")
        self.max_levels = max_levels

    def match(self, book: OrderBook, request: SwapRequest) -> MatchResult:
        """Match a request against the opposite side of the book.

        Args:
            book: The pool's order book (mutated)
            request: The incoming swap

        Returns:
            MatchResult with fills, totals and the delta for the AMM leg
        """
        maker_side = request.direction.opposite
        taker_buys = request.direction is Side.BUY

        remaining = S(request.amount)
        filled = S.zero()
        notional = S.zero()
        fills: list[Fill] = []
        levels = 0
        last_price: int | None = None
        depth_capped = False

        while remaining > 0:
            order = book.best(maker_side)
            if order is None or not request.accepts(order.limit_price):
                break

            if order.limit_price != last_price:
                if levels == self.max_levels:
                    depth_capped = True
                    break
                levels += 1
                last_price = order.limit_price

            if request.specifies_quote:
                quantity = S(base_for_quote(remaining.value, order.limit_price))
            else:
                quantity = remaining
            quantity = quantity.min(order.remaining_quantity)
            if quantity == 0:
                # Remaining quote cannot buy a single base unit at this price
                break

            quote = quote_for_base(quantity.value, order.limit_price, round_up=taker_buys)
            if request.specifies_quote and quote == 0:
                # Fill would not reduce the quote remainder
                break
            order_remaining = book.consume(order.id, quantity.value)

            filled = filled + quantity
            notional = notional + quote
            remaining = remaining - (quote if request.specifies_quote else quantity)
            fills.append(
                Fill(
                    order_id=order.id,
                    owner=order.owner,
                    price=order.limit_price,
                    quantity=quantity.value,
                    quote_amount=quote,
                    order_remaining=order_remaining,
                )
            )

        result = MatchResult(
            filled_quantity=filled.value,
            average_price=(
                average_price(notional.value, filled.value) if filled > 0 else NO_FILL_PRICE
            ),
            notional=notional.value,
            remaining_unmatched_amount=remaining.to_uint256(),
            delta=_build_delta(request, filled.value, notional.value),
            fills=fills,
            levels_consumed=levels,
            depth_capped=depth_capped,
        )

        if fills:
            logger.debug(
                "book_matched",
                pool_id=book.pool_id[:10],
                direction=request.direction.value,
                fills=len(fills),
                filled=result.filled_quantity,
                average_price=result.average_price,
                unmatched=result.remaining_unmatched_amount,
                depth_capped=depth_capped,
            )
        return result


def _build_delta(request: SwapRequest, filled: int, notional: int) -> BeforeSwapDelta:
    """Express the matched amounts as a specified/unspecified delta.

    The specified leg takes the sign of amount_specified, the unspecified
    leg the opposite sign.
    """
    if request.specifies_quote:
        specified, unspecified = notional, filled
    else:
        specified, unspecified = filled, notional
    sign = 1 if request.is_exact_input else -1
    return BeforeSwapDelta(
        specified=S(sign * specified).to_int128(),
        unspecified=S(-sign * unspecified).to_int128(),
    )


__all__ = ["MatchingEngine"]
