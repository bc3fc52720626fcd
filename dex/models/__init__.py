"""Event records and shared address/amount types."""

from dex.models.events import (
    LiquidityAdded,
    LiquidityRemoved,
    PoolCreated,
    PoolEvent,
    SwapExecuted,
)
from dex.models.types import (
    UINT256_MAX,
    ZERO_ADDRESS,
    Address,
    Uint256,
    derive_address,
    is_valid_address,
    is_zero_address,
    normalize_address,
    pair_salt,
)

__all__ = [
    # Events
    "PoolCreated",
    "LiquidityAdded",
    "LiquidityRemoved",
    "SwapExecuted",
    "PoolEvent",
    # Types
    "Address",
    "Uint256",
    "UINT256_MAX",
    "ZERO_ADDRESS",
    "normalize_address",
    "is_valid_address",
    "is_zero_address",
    "derive_address",
    "pair_salt",
]
