"""Pydantic records for events emitted by the registry and pools."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from dex.models.types import Address

Amount = Annotated[int, Field(ge=0)]


class PoolCreated(BaseModel):
    """A new pool and its claim token were registered."""

    kind: Literal["pool_created"] = "pool_created"
    asset_x: Address
    asset_y: Address
    pool: Address
    claim_token: Address
    index: int = Field(ge=0, description="Position of the pool in creation order")

    model_config = {"frozen": True}


class LiquidityAdded(BaseModel):
    """Shares minted against a deposit of both assets."""

    kind: Literal["liquidity_added"] = "liquidity_added"
    provider: Address
    amount_x: Amount
    amount_y: Amount
    shares: Amount

    model_config = {"frozen": True}


class LiquidityRemoved(BaseModel):
    """Shares burned for a proportional share of both reserves."""

    kind: Literal["liquidity_removed"] = "liquidity_removed"
    provider: Address
    amount_x: Amount
    amount_y: Amount
    shares: Amount

    model_config = {"frozen": True}


class SwapExecuted(BaseModel):
    """One asset exchanged for the other."""

    kind: Literal["swap_executed"] = "swap_executed"
    trader: Address
    asset_in: Address
    asset_out: Address
    amount_in: Amount
    amount_out: Amount

    model_config = {"frozen": True}


PoolEvent = LiquidityAdded | LiquidityRemoved | SwapExecuted
