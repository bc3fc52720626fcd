"""Liquidity pool, its claim token and the constant-product math."""

from .claim_token import ClaimToken
from .liquidity_pool import LiquidityPool
from .math import ConstantProductMath, constant_product

__all__ = [
    "ClaimToken",
    "LiquidityPool",
    "ConstantProductMath",
    "constant_product",
]
