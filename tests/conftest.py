"""Pytest configuration and fixtures."""

import pytest

from flowhook.book.order_book import OrderBook
from flowhook.hooks.controller import HookController
from flowhook.matching.engine import MatchingEngine
from flowhook.models.pool import PoolKey
from tests.helpers.factories import make_active_hook


@pytest.fixture
def book() -> OrderBook:
    """Empty order book."""
    return OrderBook("0xtestpool")


@pytest.fixture
def engine() -> MatchingEngine:
    """Matching engine with the default level cap."""
    return MatchingEngine()


@pytest.fixture
def active_hook() -> tuple[HookController, PoolKey]:
    """Controller with one initialized pool at price 100."""
    return make_active_hook()


@pytest.fixture
def hook(active_hook: tuple[HookController, PoolKey]) -> HookController:
    return active_hook[0]


@pytest.fixture
def pool_key(active_hook: tuple[HookController, PoolKey]) -> PoolKey:
    return active_hook[1]
