"""API endpoints for the exchange service."""

from dataclasses import dataclass, field
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Path, status

from dex.api.schemas import (
    AddLiquidityRequest,
    AddLiquidityResponse,
    ApproveRequest,
    BalanceResponse,
    CreateAssetRequest,
    CreatePoolRequest,
    MintRequest,
    PoolInfo,
    RemoveLiquidityRequest,
    RemoveLiquidityResponse,
    SharesResponse,
    SwapRequest,
    SwapResponse,
    TransferRequest,
)
from dex.config import DexConfig
from dex.errors import AssetExists, UnknownAsset
from dex.ledger.memory import InMemoryAssetLedger
from dex.registry import PoolRegistry

logger = structlog.get_logger()

router = APIRouter()

AddressPath = Annotated[str, Path(pattern=r"^0x[a-fA-F0-9]{40}$")]


@dataclass
class Exchange:
    """The ledger and registry served by one process."""

    config: DexConfig = field(default_factory=DexConfig.from_env)
    ledger: InMemoryAssetLedger = field(default_factory=InMemoryAssetLedger)
    registry: PoolRegistry = field(init=False)

    def __post_init__(self) -> None:
        self.registry = PoolRegistry(self.ledger, self.config)


_exchange: Exchange | None = None


def get_exchange() -> Exchange:
    """Dependency provider for the exchange instance.

    Override this in tests to inject a fresh exchange:
        app.dependency_overrides[get_exchange] = lambda: Exchange()
    """
    global _exchange
    if _exchange is None:
        _exchange = Exchange()
    return _exchange


def _require_asset(exchange: Exchange, asset: str) -> None:
    if not exchange.ledger.has_asset(asset):
        raise UnknownAsset(f"Asset not registered: {asset}")


# --- Assets ---


@router.post("/assets", status_code=status.HTTP_201_CREATED)
def create_asset(
    request: CreateAssetRequest,
    exchange: Exchange = Depends(get_exchange),
) -> dict[str, str]:
    if exchange.ledger.has_asset(request.address):
        raise AssetExists(f"Asset already registered: {request.address}")
    asset = exchange.ledger.create_asset(
        request.address, request.name, request.symbol, request.transfer_fee_bps
    )
    logger.info("asset_created", asset=asset[-8:], symbol=request.symbol)
    return {"address": asset, "name": request.name, "symbol": request.symbol}


@router.post("/assets/{asset}/mint")
def mint_asset(
    asset: AddressPath,
    request: MintRequest,
    exchange: Exchange = Depends(get_exchange),
) -> BalanceResponse:
    _require_asset(exchange, asset)
    exchange.ledger.mint(asset, request.to, int(request.amount))
    return _balance(exchange, asset, request.to)


@router.post("/assets/{asset}/approve")
def approve_asset(
    asset: AddressPath,
    request: ApproveRequest,
    exchange: Exchange = Depends(get_exchange),
) -> dict[str, str]:
    _require_asset(exchange, asset)
    exchange.ledger.approve(asset, request.owner, request.spender, int(request.amount))
    allowance = exchange.ledger.allowance(asset, request.owner, request.spender)
    return {"allowance": str(allowance)}


@router.post("/assets/{asset}/transfer")
def transfer_asset(
    asset: AddressPath,
    request: TransferRequest,
    exchange: Exchange = Depends(get_exchange),
) -> BalanceResponse:
    """Direct holder-to-holder transfer (also how donations reach a pool)."""
    _require_asset(exchange, asset)
    exchange.ledger.transfer(asset, request.sender, request.recipient, int(request.amount))
    return _balance(exchange, asset, request.recipient)


@router.get("/assets/{asset}/balances/{holder}")
def get_balance(
    asset: AddressPath,
    holder: AddressPath,
    exchange: Exchange = Depends(get_exchange),
) -> BalanceResponse:
    _require_asset(exchange, asset)
    return _balance(exchange, asset, holder)


def _balance(exchange: Exchange, asset: str, holder: str) -> BalanceResponse:
    return BalanceResponse(
        asset=asset.lower(),
        holder=holder.lower(),
        balance=str(exchange.ledger.balance_of(asset, holder)),
    )


# --- Pools ---


@router.post("/pools", status_code=status.HTTP_201_CREATED)
def create_pool(
    request: CreatePoolRequest,
    exchange: Exchange = Depends(get_exchange),
) -> PoolInfo:
    pool = exchange.registry.create_pool(request.asset_a, request.asset_b)
    return PoolInfo.from_pool(pool)


@router.get("/pools")
def list_pools(exchange: Exchange = Depends(get_exchange)) -> list[PoolInfo]:
    return [PoolInfo.from_pool(pool) for pool in exchange.registry.all_pools()]


@router.get("/pools/{asset_a}/{asset_b}")
def get_pool(
    asset_a: AddressPath,
    asset_b: AddressPath,
    exchange: Exchange = Depends(get_exchange),
) -> PoolInfo:
    return PoolInfo.from_pool(exchange.registry.require_pool(asset_a, asset_b))


@router.post("/pools/{asset_a}/{asset_b}/liquidity")
def add_liquidity(
    asset_a: AddressPath,
    asset_b: AddressPath,
    request: AddLiquidityRequest,
    exchange: Exchange = Depends(get_exchange),
) -> AddLiquidityResponse:
    pool = exchange.registry.require_pool(asset_a, asset_b)
    shares = pool.add_liquidity(request.provider, int(request.amount_x), int(request.amount_y))
    return AddLiquidityResponse(shares=str(shares), pool=PoolInfo.from_pool(pool))


@router.post("/pools/{asset_a}/{asset_b}/liquidity/remove")
def remove_liquidity(
    asset_a: AddressPath,
    asset_b: AddressPath,
    request: RemoveLiquidityRequest,
    exchange: Exchange = Depends(get_exchange),
) -> RemoveLiquidityResponse:
    pool = exchange.registry.require_pool(asset_a, asset_b)
    amount_x, amount_y = pool.remove_liquidity(request.provider, int(request.shares))
    return RemoveLiquidityResponse(
        amount_x=str(amount_x),
        amount_y=str(amount_y),
        pool=PoolInfo.from_pool(pool),
    )


@router.post("/pools/{asset_a}/{asset_b}/swap")
def swap(
    asset_a: AddressPath,
    asset_b: AddressPath,
    request: SwapRequest,
    exchange: Exchange = Depends(get_exchange),
) -> SwapResponse:
    pool = exchange.registry.require_pool(asset_a, asset_b)
    amount_out = pool.swap(
        request.trader,
        request.asset_in,
        request.asset_out,
        int(request.amount_in),
        min_amount_out=int(request.min_amount_out),
    )
    return SwapResponse(amount_out=str(amount_out), pool=PoolInfo.from_pool(pool))


@router.get("/pools/{asset_a}/{asset_b}/shares/{holder}")
def get_shares(
    asset_a: AddressPath,
    asset_b: AddressPath,
    holder: AddressPath,
    exchange: Exchange = Depends(get_exchange),
) -> SharesResponse:
    pool = exchange.registry.require_pool(asset_a, asset_b)
    return SharesResponse(
        pool=pool.address,
        holder=holder.lower(),
        shares=str(pool.shares_of(holder)),
    )
