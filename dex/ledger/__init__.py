"""Asset ledger interface and the in-memory reference ledger."""

from .base import AssetLedger
from .memory import AssetState, InMemoryAssetLedger

__all__ = [
    "AssetLedger",
    "AssetState",
    "InMemoryAssetLedger",
]
