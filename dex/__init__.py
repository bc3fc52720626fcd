"""Two-asset constant-product exchange."""

from dex.errors import DexError
from dex.ledger import AssetLedger, InMemoryAssetLedger
from dex.pool import ClaimToken, LiquidityPool
from dex.registry import PoolRegistry

__version__ = "0.1.0"
__all__ = [
    "AssetLedger",
    "ClaimToken",
    "DexError",
    "InMemoryAssetLedger",
    "LiquidityPool",
    "PoolRegistry",
    "__version__",
]
