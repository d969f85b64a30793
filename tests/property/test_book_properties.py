"""Randomized properties of the order book and order placement.

Each property runs once per seed; a failure names the seed that
reproduces it.
"""

import random

import pytest

from flowhook.book.order import Side
from flowhook.book.order_book import OrderBook
from flowhook.errors import OrderNotFound
from flowhook.matching.engine import MatchingEngine
from flowhook.matching.types import SwapRequest
from tests.helpers import make_active_hook, rest_order
from tests.helpers.fuzz import (
    SEEDS,
    bound,
    random_address,
    random_price,
    random_quantity,
)

pytestmark = pytest.mark.property


def random_book(rng: random.Random, max_orders: int = 20) -> OrderBook:
    """Uncrossed book: bids below a pivot price, asks at or above it."""
    book = OrderBook("0xfuzz")
    pivot = random_price(rng)
    for _ in range(bound(rng.getrandbits(16), 1, max_orders)):
        side = rng.choice([Side.BUY, Side.SELL])
        offset = bound(rng.getrandbits(64), 1, pivot // 2)
        price = pivot - offset if side is Side.BUY else pivot + offset
        rest_order(book, random_address(rng), side, price, random_quantity(rng))
    return book


@pytest.mark.parametrize("seed", SEEDS)
def test_consume_conserves_quantity(seed):
    rng = random.Random(seed)
    book = random_book(rng)
    order = rng.choice(book.orders(Side.BUY) + book.orders(Side.SELL))
    amount = bound(rng.getrandbits(80), 1, order.remaining_quantity)
    before = book.total_quantity()

    book.consume(order.id, amount)

    assert book.total_quantity() == before - amount


@pytest.mark.parametrize("seed", SEEDS)
def test_cancel_conserves_quantity_and_is_idempotent(seed):
    rng = random.Random(seed)
    book = random_book(rng)
    order = rng.choice(book.orders(Side.BUY) + book.orders(Side.SELL))
    before = book.total_quantity()

    freed = book.cancel(order.id, order.owner)

    assert freed == order.remaining_quantity
    assert book.total_quantity() == before - freed
    fingerprint = book.fingerprint()
    with pytest.raises(OrderNotFound):
        book.cancel(order.id, order.owner)
    assert book.fingerprint() == fingerprint


@pytest.mark.parametrize("seed", SEEDS)
def test_sides_sorted_by_price_then_time(seed):
    rng = random.Random(seed)
    book = OrderBook("0xfuzz")
    for _ in range(30):
        # Few distinct prices so ties are common
        price = random_price(rng) // 10**17 * 10**17 + 10**17
        side = rng.choice([Side.BUY, Side.SELL])
        rest_order(book, random_address(rng), side, price, random_quantity(rng))

    bids = book.orders(Side.BUY)
    asks = book.orders(Side.SELL)
    assert all(
        (a.limit_price, -a.insertion_sequence) >= (b.limit_price, -b.insertion_sequence)
        for a, b in zip(bids, bids[1:], strict=False)
    )
    assert all(
        (a.limit_price, a.insertion_sequence) <= (b.limit_price, b.insertion_sequence)
        for a, b in zip(asks, asks[1:], strict=False)
    )


@pytest.mark.parametrize("seed", SEEDS)
def test_fill_prices_monotonic(seed):
    """A buying taker never pays less for a later fill than an earlier one."""
    rng = random.Random(seed)
    book = random_book(rng)
    direction = rng.choice([Side.BUY, Side.SELL])
    request = SwapRequest(direction=direction, amount_specified=random_quantity(rng) * 5)

    result = MatchingEngine().match(book, request)

    prices = [f.price for f in result.fills]
    expected = sorted(prices) if direction is Side.BUY else sorted(prices, reverse=True)
    assert prices == expected


@pytest.mark.parametrize("seed", SEEDS)
def test_placement_never_crosses_book(seed):
    rng = random.Random(seed)
    hook, key = make_active_hook()
    book = hook.get_book(key)
    center = random_price(rng)

    for _ in range(25):
        side = rng.choice([Side.BUY, Side.SELL])
        price = bound(rng.getrandbits(64), center * 9 // 10, center * 11 // 10)
        quantity = random_quantity(rng)
        before = book.total_quantity()

        placement = hook.place_order(key, random_address(rng), side, price, quantity)

        assert not book.is_crossed()
        assert placement.filled_quantity + placement.rested_quantity == quantity
        assert book.total_quantity() == before - placement.filled_quantity + (
            placement.rested_quantity
        )
