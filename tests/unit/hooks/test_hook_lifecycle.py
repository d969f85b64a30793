"""Tests for pool initialization callbacks and hook permissions."""

import pytest

from flowhook.errors import AlreadyInitialized, HookAddressMismatch, PoolNotInitialized
from flowhook.hooks.base import Hooks, HookSelector
from flowhook.hooks.controller import HookController
from flowhook.hooks.registry import PoolState
from flowhook.math.price import price_to_sqrt_price_x96
from flowhook.models.pool import SwapParams
from tests.helpers import ONE, OTHER_HOOK, ROUTER, make_key

SQRT_PRICE = price_to_sqrt_price_x96(100 * ONE)


@pytest.fixture
def fresh_hook() -> HookController:
    return HookController()


class TestInitialize:
    def test_two_phase_initialization(self, fresh_hook):
        key = make_key()

        assert fresh_hook.before_initialize(ROUTER, key, SQRT_PRICE) is (
            HookSelector.BEFORE_INITIALIZE
        )
        assert fresh_hook.registry.get(key).state is PoolState.PREPARED

        assert fresh_hook.after_initialize(ROUTER, key, SQRT_PRICE, 46054) is (
            HookSelector.AFTER_INITIALIZE
        )
        entry = fresh_hook.registry.get(key)
        assert entry.is_active
        assert entry.tick == 46054
        assert len(fresh_hook.get_book(key)) == 0

    def test_wrong_hook_address(self, fresh_hook):
        key = make_key(hooks=OTHER_HOOK)

        with pytest.raises(HookAddressMismatch):
            fresh_hook.before_initialize(ROUTER, key, SQRT_PRICE)
        assert key not in fresh_hook.registry

    def test_double_initialize(self, active_hook):
        hook, key = active_hook

        with pytest.raises(AlreadyInitialized):
            hook.before_initialize(ROUTER, key, SQRT_PRICE)

    def test_after_without_before(self, fresh_hook):
        with pytest.raises(PoolNotInitialized):
            fresh_hook.after_initialize(ROUTER, make_key(), SQRT_PRICE, 0)

    def test_prepared_pool_rejects_swaps(self, fresh_hook):
        key = make_key()
        fresh_hook.before_initialize(ROUTER, key, SQRT_PRICE)

        with pytest.raises(PoolNotInitialized):
            fresh_hook.before_swap(ROUTER, key, SwapParams(True, ONE))

    def test_pools_are_independent(self, fresh_hook):
        a = make_key(fee=500)
        b = make_key(fee=3000)
        for key in (a, b):
            fresh_hook.before_initialize(ROUTER, key, SQRT_PRICE)
            fresh_hook.after_initialize(ROUTER, key, SQRT_PRICE, 0)

        assert fresh_hook.get_book(a) is not fresh_hook.get_book(b)
        assert a.pool_id != b.pool_id


class TestPermissions:
    def test_enabled_callbacks(self):
        perms = HookController.permissions()

        assert perms.before_initialize and perms.after_initialize
        assert perms.before_swap and perms.after_swap
        assert perms.before_modify_liquidity and perms.after_modify_liquidity
        assert perms.before_swap_returns_delta
        assert not perms.after_swap_returns_delta
        assert not perms.after_modify_liquidity_returns_delta

    def test_controller_implements_hooks_protocol(self, fresh_hook):
        assert isinstance(fresh_hook, Hooks)

    def test_selectors_are_signatures(self):
        assert HookSelector.BEFORE_SWAP.value.startswith("beforeSwap(address,")


def test_invalid_hook_address_rejected():
    with pytest.raises(ValueError):
        HookController(address="0x1234")
