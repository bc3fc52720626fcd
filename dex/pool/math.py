"""Constant-product pricing and share arithmetic.

Formula: amount_out = (amount_in * reserve_out) / (reserve_in + amount_in)

No protocol fee is taken. All results are floored integers, so rounding
always favours the pool.
"""

from dex.safe_int import S


class ConstantProductMath:
    """Pure integer math for a two-asset constant-product pool."""

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Calculate swap output for an exact input.

        Args:
            amount_in: Input asset amount
            reserve_in: Pool custody of the input asset
            reserve_out: Pool custody of the output asset

        Returns:
            Output amount, strictly below reserve_out. Zero for a
            non-positive input or an empty side.
        """
        if amount_in <= 0:
            return 0
        if reserve_in <= 0 or reserve_out <= 0:
            return 0

        numerator = S(reserve_out) * S(amount_in)
        denominator = S(reserve_in) + S(amount_in)
        return (numerator // denominator).value

    def initial_shares(self, amount_x: int, amount_y: int) -> int:
        """Shares minted by the first deposit: floor(sqrt(x * y))."""
        return (S(amount_x) * S(amount_y)).sqrt().value

    def proportional_shares(self, amount_x: int, reserve_x: int, total_shares: int) -> int:
        """Shares minted by a deposit into a funded pool.

        The ratio check guarantees the X and Y sides agree, so X alone is
        used.
        """
        return S(amount_x).mul_div(total_shares, reserve_x).value

    def proportional_amounts(
        self,
        shares: int,
        reserve_x: int,
        reserve_y: int,
        total_shares: int,
    ) -> tuple[int, int]:
        """Assets returned for burning `shares`. Dust stays in the pool."""
        amount_x = S(reserve_x).mul_div(shares, total_shares)
        amount_y = S(reserve_y).mul_div(shares, total_shares)
        return amount_x.value, amount_y.value

    def ratio_matches(self, amount_x: int, amount_y: int, reserve_x: int, reserve_y: int) -> bool:
        """Exact cross-multiplied check that a deposit keeps the reserve ratio."""
        return S(amount_x) * S(reserve_y) == S(amount_y) * S(reserve_x)


# Singleton instance
constant_product = ConstantProductMath()
