"""Pytest configuration and fixtures."""

import pytest

from dex.ledger.memory import InMemoryAssetLedger
from dex.pool.liquidity_pool import LiquidityPool
from dex.registry import PoolRegistry
from tests.helpers import TOKEN_A, TOKEN_B, USER1, USER2, approve_all, make_ledger


@pytest.fixture
def ledger() -> InMemoryAssetLedger:
    """A ledger with the test assets, USER1 and USER2 funded."""
    return make_ledger()


@pytest.fixture
def registry(ledger: InMemoryAssetLedger) -> PoolRegistry:
    """An empty registry over the test ledger."""
    return PoolRegistry(ledger)


@pytest.fixture
def pool(ledger: InMemoryAssetLedger, registry: PoolRegistry) -> LiquidityPool:
    """The TOKEN_A/TOKEN_B pool, with both users' approvals set to max."""
    created = registry.create_pool(TOKEN_A, TOKEN_B)
    approve_all(ledger, created.address, USER1, USER2)
    return created


@pytest.fixture
def funded_pool(pool: LiquidityPool) -> LiquidityPool:
    """The A/B pool after USER1 deposited 1000/1000 (raw units)."""
    pool.add_liquidity(USER1, 1000, 1000)
    return pool
