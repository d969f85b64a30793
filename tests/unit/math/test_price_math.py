"""Tests for sqrt price conversion and quote/base rounding."""

import pytest

from flowhook.constants import PRICE_SCALE, Q96
from flowhook.math.price import (
    average_price,
    base_for_quote,
    price_to_sqrt_price_x96,
    quote_for_base,
    sqrt_price_x96_to_price,
)
from flowhook.safe_int import DivisionByZero
from tests.helpers.fuzz import assert_approx_eq_abs


class TestSqrtPrice:
    def test_unit_price(self):
        assert sqrt_price_x96_to_price(Q96) == PRICE_SCALE
        assert price_to_sqrt_price_x96(PRICE_SCALE) == Q96

    def test_price_of_four(self):
        assert sqrt_price_x96_to_price(2 * Q96) == 4 * PRICE_SCALE

    @pytest.mark.parametrize("price", [10**15, 10**18, 2500 * 10**18, 10**21])
    def test_round_trip_close(self, price):
        back = sqrt_price_x96_to_price(price_to_sqrt_price_x96(price))

        assert back <= price
        assert_approx_eq_abs(back, price, price // 10**12 + 1)

    def test_negative_price_rejected(self):
        with pytest.raises(ValueError):
            price_to_sqrt_price_x96(-1)


class TestQuoteBase:
    def test_quote_rounding_direction(self):
        price = 3 * PRICE_SCALE // 2
        assert quote_for_base(3, price, round_up=True) == 5
        assert quote_for_base(3, price, round_up=False) == 4

    def test_exact_quote_has_no_rounding(self):
        assert quote_for_base(2 * PRICE_SCALE, 100 * PRICE_SCALE, round_up=True) == (
            200 * PRICE_SCALE
        )

    def test_base_for_quote_floors(self):
        assert base_for_quote(250, 100 * PRICE_SCALE) == 2
        assert base_for_quote(99, 100 * PRICE_SCALE) == 0


class TestAveragePrice:
    def test_exact(self):
        assert average_price(300 * PRICE_SCALE, 3 * PRICE_SCALE) == 100 * PRICE_SCALE

    def test_rounds_toward_zero(self):
        assert average_price(10, 3 * PRICE_SCALE) == 3

    def test_zero_filled_raises(self):
        with pytest.raises(DivisionByZero):
            average_price(1, 0)
