"""Tests for constant-product pool math."""

import pytest

from dex.pool.math import ConstantProductMath, constant_product
from dex.safe_int import DivisionByZero


class TestGetAmountOut:
    """Tests for swap output pricing."""

    def test_reference_swap(self):
        """10 in against (1000, 1000) gives floor(10000 / 1010) = 9."""
        assert constant_product.get_amount_out(10, 1000, 1000) == 9

    @pytest.mark.parametrize("amount_in", [1, 10, 100, 999, 1000, 10**6, 10**30])
    def test_matches_formula(self, amount_in):
        expected = 1000 * amount_in // (1000 + amount_in)
        assert constant_product.get_amount_out(amount_in, 1000, 1000) == expected

    @pytest.mark.parametrize("amount_in", [1, 10**3, 10**18, 10**40, 2**256 - 1])
    def test_output_strictly_below_reserve(self, amount_in):
        """No input, however large, drains the output side."""
        assert constant_product.get_amount_out(amount_in, 1000, 1000) < 1000

    def test_zero_input_returns_zero(self):
        assert constant_product.get_amount_out(0, 1000, 1000) == 0

    def test_empty_side_returns_zero(self):
        assert constant_product.get_amount_out(10, 0, 1000) == 0
        assert constant_product.get_amount_out(10, 1000, 0) == 0

    def test_product_never_decreases(self):
        """Floor rounding keeps k = x * y non-decreasing for the pool."""
        reserve_in, reserve_out = 123_457, 987_653
        for amount_in in (1, 17, 4_321, 99_999):
            out = constant_product.get_amount_out(amount_in, reserve_in, reserve_out)
            assert (reserve_in + amount_in) * (reserve_out - out) >= reserve_in * reserve_out


class TestShareMath:
    """Tests for share minting and redemption math."""

    @pytest.mark.parametrize(
        "amount_x,amount_y,expected",
        [(100, 100, 100), (2, 2, 2), (1, 3, 1), (10**18, 4 * 10**18, 2 * 10**18)],
    )
    def test_initial_shares(self, amount_x, amount_y, expected):
        assert constant_product.initial_shares(amount_x, amount_y) == expected

    def test_initial_shares_wide_product(self):
        """Product above uint256 is still computed exactly."""
        amount = 2**200
        assert constant_product.initial_shares(amount, amount) == amount

    def test_proportional_shares(self):
        assert constant_product.proportional_shares(50, 100, 100) == 50
        assert constant_product.proportional_shares(1, 3, 2) == 0

    def test_proportional_shares_empty_reserve_raises(self):
        with pytest.raises(DivisionByZero):
            constant_product.proportional_shares(1, 0, 100)

    def test_proportional_amounts_floor(self):
        """Dust stays in the pool."""
        assert constant_product.proportional_amounts(1, 10, 11, 3) == (3, 3)

    def test_full_redemption_returns_everything(self):
        assert constant_product.proportional_amounts(7, 1001, 999, 7) == (1001, 999)

    def test_ratio_matches_is_exact(self):
        math = ConstantProductMath()
        assert math.ratio_matches(50, 50, 100, 100)
        assert math.ratio_matches(1, 3, 1000, 3000)
        assert not math.ratio_matches(50, 100, 100, 100)
        assert not math.ratio_matches(1000, 3001, 1000, 3000)
