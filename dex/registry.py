"""Pool registry: one pool per unordered asset pair.

Pools are keyed by the canonical pair (min(a, b), max(a, b)) over
normalized addresses, so lookups are independent of argument order. A
registered pool is never replaced or removed.
"""

from __future__ import annotations

import threading
from collections import deque

import structlog

from dex.config import DEFAULT_DEX_CONFIG, DexConfig
from dex.errors import CustodyInUse, IdenticalAssets, InvalidAsset, PairExists, PoolNotFound
from dex.ledger.base import AssetLedger
from dex.models.events import PoolCreated
from dex.models.types import (
    derive_address,
    is_valid_address,
    is_zero_address,
    normalize_address,
    pair_salt,
)
from dex.pool.liquidity_pool import LiquidityPool

logger = structlog.get_logger()

PairKey = tuple[str, str]


def pair_key(asset_a: str, asset_b: str) -> PairKey:
    """Canonical, order-independent key for an asset pair."""
    a = normalize_address(asset_a)
    b = normalize_address(asset_b)
    return (a, b) if a < b else (b, a)


class PoolRegistry:
    """Creates and indexes LiquidityPool instances.

    All pools created here share the registry's ledger. Pool addresses are
    derived from the registry address and the canonical pair.
    """

    def __init__(self, ledger: AssetLedger, config: DexConfig = DEFAULT_DEX_CONFIG) -> None:
        self._ledger = ledger
        self._config = config
        self._address = normalize_address(config.registry_address, validate=True)
        self._pools: dict[PairKey, LiquidityPool] = {}
        # Creation order, for index-based enumeration
        self._all_pools: list[LiquidityPool] = []
        self.events: deque[PoolCreated] = deque(maxlen=config.event_history)
        self._lock = threading.Lock()

    @property
    def address(self) -> str:
        return self._address

    @property
    def ledger(self) -> AssetLedger:
        return self._ledger

    def create_pool(self, asset_a: str, asset_b: str) -> LiquidityPool:
        """Create the pool for an unordered pair.

        Args:
            asset_a: One asset of the pair (any case)
            asset_b: The other asset (any case)

        Returns:
            The newly created pool, with asset_x < asset_y

        Raises:
            IdenticalAssets: If both assets are the same
            InvalidAsset: If either asset is the zero address or malformed
            PairExists: If the pair already has a pool
            CustodyInUse: If another registry on the same ledger already
                created this pool address
        """
        for asset in (asset_a, asset_b):
            if not isinstance(asset, str):
                raise InvalidAsset(f"Invalid asset: {asset!r}")
        a = normalize_address(asset_a)
        b = normalize_address(asset_b)
        if a == b:
            raise IdenticalAssets(f"Identical assets: {a}")
        for asset in (a, b):
            if not is_valid_address(asset) or is_zero_address(asset):
                raise InvalidAsset(f"Invalid asset: {asset}")

        key = pair_key(a, b)
        with self._lock:
            if key in self._pools:
                logger.warning("pool_exists", token0=key[0][-8:], token1=key[1][-8:])
                raise PairExists(f"Pool already exists for {key[0]}/{key[1]}")

            address = derive_address(self._address, pair_salt(*key))
            try:
                pool = LiquidityPool(
                    address=address,
                    asset_x=key[0],
                    asset_y=key[1],
                    ledger=self._ledger,
                    claim_token_name=self._config.claim_token_name,
                    claim_token_symbol=self._config.claim_token_symbol,
                    event_history=self._config.event_history,
                )
            except CustodyInUse:
                # Another registry with the same address shares this ledger
                logger.warning(
                    "pool_address_in_use", pool=address[-8:], registry=self._address[-8:]
                )
                raise
            self._pools[key] = pool
            self._all_pools.append(pool)
            event = PoolCreated(
                asset_x=key[0],
                asset_y=key[1],
                pool=pool.address,
                claim_token=pool.claim_token.address,
                index=len(self._all_pools) - 1,
            )
            self.events.append(event)

        logger.info(
            "pool_created",
            pool=pool.address[-8:],
            token0=key[0][-8:],
            token1=key[1][-8:],
            index=event.index,
        )
        return pool

    def get_pool(self, asset_a: str, asset_b: str) -> LiquidityPool | None:
        """Get the pool for a pair (order independent), or None."""
        return self._pools.get(pair_key(asset_a, asset_b))

    def require_pool(self, asset_a: str, asset_b: str) -> LiquidityPool:
        """Get the pool for a pair, raising PoolNotFound if there is none."""
        pool = self.get_pool(asset_a, asset_b)
        if pool is None:
            raise PoolNotFound(f"No pool for {asset_a}/{asset_b}")
        return pool

    def count(self) -> int:
        """Number of pools ever created."""
        return len(self._all_pools)

    def all_pools(self) -> list[LiquidityPool]:
        """All pools in creation order."""
        return list(self._all_pools)

    def pool_at(self, index: int) -> LiquidityPool:
        """Pool at a creation-order index."""
        return self._all_pools[index]

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, pair: object) -> bool:
        if not isinstance(pair, tuple) or len(pair) != 2:
            return False
        if not all(isinstance(asset, str) for asset in pair):
            return False
        return pair_key(*pair) in self._pools
