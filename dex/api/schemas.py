"""Request and response bodies for the HTTP service.

Amounts travel as uint256 decimal strings, matching how token amounts are
exchanged with wallets and indexers.
"""

from pydantic import BaseModel, Field

from dex.models.types import Address, Uint256
from dex.pool.liquidity_pool import LiquidityPool


class CreateAssetRequest(BaseModel):
    address: Address
    name: str = Field(min_length=1)
    symbol: str = Field(min_length=1)
    transfer_fee_bps: int = Field(default=0, ge=0, lt=10_000)


class MintRequest(BaseModel):
    to: Address
    amount: Uint256


class ApproveRequest(BaseModel):
    owner: Address
    spender: Address
    amount: Uint256


class TransferRequest(BaseModel):
    sender: Address
    recipient: Address
    amount: Uint256


class BalanceResponse(BaseModel):
    asset: Address
    holder: Address
    balance: Uint256


class CreatePoolRequest(BaseModel):
    asset_a: Address
    asset_b: Address


class PoolInfo(BaseModel):
    """Public view of a pool."""

    address: Address
    asset_x: Address
    asset_y: Address
    claim_token: Address
    reserve_x: Uint256
    reserve_y: Uint256
    total_shares: Uint256

    @classmethod
    def from_pool(cls, pool: LiquidityPool) -> "PoolInfo":
        reserve_x, reserve_y = pool.get_reserves()
        return cls(
            address=pool.address,
            asset_x=pool.asset_x,
            asset_y=pool.asset_y,
            claim_token=pool.claim_token.address,
            reserve_x=str(reserve_x),
            reserve_y=str(reserve_y),
            total_shares=str(pool.total_shares),
        )


class AddLiquidityRequest(BaseModel):
    provider: Address
    amount_x: Uint256
    amount_y: Uint256


class AddLiquidityResponse(BaseModel):
    shares: Uint256
    pool: PoolInfo


class RemoveLiquidityRequest(BaseModel):
    provider: Address
    shares: Uint256


class RemoveLiquidityResponse(BaseModel):
    amount_x: Uint256
    amount_y: Uint256
    pool: PoolInfo


class SwapRequest(BaseModel):
    trader: Address
    asset_in: Address
    asset_out: Address
    amount_in: Uint256
    min_amount_out: Uint256 = "0"


class SwapResponse(BaseModel):
    amount_out: Uint256
    pool: PoolInfo


class SharesResponse(BaseModel):
    pool: Address
    holder: Address
    shares: Uint256


class ErrorResponse(BaseModel):
    error: str
    detail: str
