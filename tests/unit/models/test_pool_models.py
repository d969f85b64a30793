"""Tests for pool-manager boundary types."""

import pytest

from flowhook.constants import INT128_MAX, MAX_SQRT_PRICE, MIN_SQRT_PRICE
from flowhook.models.pool import BalanceDelta, BeforeSwapDelta, PoolKey, SwapParams
from tests.helpers import BASE_TOKEN, HOOK, QUOTE_TOKEN, make_key


class TestPoolKey:
    def test_addresses_normalized(self):
        key = PoolKey(
            currency0=BASE_TOKEN.upper().replace("0X", "0x"),
            currency1=QUOTE_TOKEN,
            fee=3000,
            hooks=HOOK,
        )
        assert key.currency0 == BASE_TOKEN

    def test_currencies_must_be_ordered(self):
        with pytest.raises(ValueError):
            PoolKey(currency0=QUOTE_TOKEN, currency1=BASE_TOKEN, fee=3000)

    def test_invalid_address(self):
        with pytest.raises(ValueError):
            PoolKey(currency0="0x12", currency1=QUOTE_TOKEN, fee=3000)

    def test_invalid_tick_spacing(self):
        with pytest.raises(ValueError):
            make_key(tick_spacing=0)

    def test_pool_id_stable_and_distinct(self):
        assert make_key().pool_id == make_key().pool_id
        assert make_key(fee=500).pool_id != make_key(fee=3000).pool_id
        assert make_key().pool_id.startswith("0x")
        assert len(make_key().pool_id) == 66

    def test_hashable(self):
        assert {make_key(): 1}[make_key()] == 1


class TestSwapParams:
    def test_zero_amount_rejected(self):
        with pytest.raises(ValueError):
            SwapParams(True, 0)

    def test_exact_input(self):
        assert SwapParams(True, 5).is_exact_input
        assert not SwapParams(True, -5).is_exact_input

    @pytest.mark.parametrize(
        ("limit", "expected"),
        [
            (0, False),
            (MIN_SQRT_PRICE + 1, False),
            (MAX_SQRT_PRICE - 1, False),
            (2**96, True),
        ],
    )
    def test_has_price_limit(self, limit, expected):
        assert SwapParams(True, 1, limit).has_price_limit is expected


class TestDeltas:
    def test_int128_enforced(self):
        BalanceDelta(INT128_MAX, -INT128_MAX)
        with pytest.raises(ValueError):
            BalanceDelta(INT128_MAX + 1, 0)
        with pytest.raises(ValueError):
            BeforeSwapDelta(0, INT128_MAX + 1)

    def test_zero(self):
        assert BeforeSwapDelta.zero().is_zero
        assert not BeforeSwapDelta(1, -1).is_zero
        assert BalanceDelta.zero() == BalanceDelta(0, 0)
