"""Two-asset constant-product liquidity pool.

A pool holds custody of two assets on an AssetLedger and issues claim
token shares against deposits. It has two macro-states:

- Empty: no shares outstanding (initial state, and again after a full
  withdrawal)
- Funded: shares outstanding and both reserves positive

Every price and share computation reads the pool's actual ledger balances,
so assets transferred in out-of-band (donations) are priced in. After each
mutating operation the stored reserves are reset to those balances.

Mutating operations run under a per-pool lock and inside the ledger's
atomic() block, custody reads included: either every transfer, mint and
burn of a call lands, or none does.
"""

from __future__ import annotations

import threading
from collections import deque

import structlog

from dex.config import DEFAULT_EVENT_HISTORY
from dex.errors import (
    IdenticalAssets,
    InsufficientBalance,
    InsufficientLiquidityForSwap,
    InsufficientSharesMinted,
    InvalidAmount,
    InvalidAsset,
    InvalidRatio,
    InvalidToken,
    SlippageExceeded,
    TransferAmountMismatch,
)
from dex.ledger.base import AssetLedger
from dex.models.events import LiquidityAdded, LiquidityRemoved, PoolEvent, SwapExecuted
from dex.models.types import (
    UINT256_MAX,
    derive_address,
    is_valid_address,
    is_zero_address,
    normalize_address,
)
from dex.pool.claim_token import DEFAULT_NAME, DEFAULT_SYMBOL, ClaimToken
from dex.pool.math import ConstantProductMath, constant_product

logger = structlog.get_logger()

CLAIM_TOKEN_SALT = b"claim-token"


class LiquidityPool:
    """Reserves, pricing and share accounting for one asset pair."""

    def __init__(
        self,
        address: str,
        asset_x: str,
        asset_y: str,
        ledger: AssetLedger,
        *,
        claim_token_name: str = DEFAULT_NAME,
        claim_token_symbol: str = DEFAULT_SYMBOL,
        math: ConstantProductMath = constant_product,
        event_history: int = DEFAULT_EVENT_HISTORY,
    ) -> None:
        """Create a pool and the claim token it controls.

        Args:
            address: Identity under which the pool holds custody
            asset_x: First asset of the pair
            asset_y: Second asset of the pair
            ledger: Ledger holding both assets
            claim_token_name: Name of the pool's claim token
            claim_token_symbol: Symbol of the pool's claim token
            math: Pricing and share arithmetic
            event_history: Number of most recent events kept in `events`

        Raises:
            InvalidAsset: If an asset is malformed or the zero address
            IdenticalAssets: If both assets are the same
            CustodyInUse: If another pool on the ledger uses this address
        """
        for asset in (asset_x, asset_y):
            if not isinstance(asset, str):
                raise InvalidAsset(f"Invalid asset: {asset!r}")
            if not is_valid_address(normalize_address(asset)) or is_zero_address(asset):
                raise InvalidAsset(f"Invalid asset: {asset}")
        self._asset_x = normalize_address(asset_x)
        self._asset_y = normalize_address(asset_y)
        if self._asset_x == self._asset_y:
            raise IdenticalAssets(f"Pool assets must differ: {self._asset_x}")

        self._address = normalize_address(address, validate=True)
        self._ledger = ledger
        ledger.claim_custody(self._address)
        self._math = math
        self._claim_token = ClaimToken(
            address=derive_address(self._address, CLAIM_TOKEN_SALT),
            owner=self,
            name=claim_token_name,
            symbol=claim_token_symbol,
        )
        self._reserve_x = 0
        self._reserve_y = 0
        self._lock = threading.RLock()
        self.events: deque[PoolEvent] = deque(maxlen=event_history)

    def __repr__(self) -> str:
        return f"LiquidityPool({self._address}, {self._asset_x}/{self._asset_y})"

    # --- Read-only views ---

    @property
    def address(self) -> str:
        return self._address

    @property
    def asset_x(self) -> str:
        return self._asset_x

    @property
    def asset_y(self) -> str:
        return self._asset_y

    @property
    def claim_token(self) -> ClaimToken:
        return self._claim_token

    @property
    def total_shares(self) -> int:
        return self._claim_token.total_supply

    @property
    def is_empty(self) -> bool:
        return self._claim_token.total_supply == 0

    def get_reserves(self) -> tuple[int, int]:
        """Stored reserves as (reserve_x, reserve_y)."""
        with self._lock:
            return self._reserve_x, self._reserve_y

    def shares_of(self, holder: str) -> int:
        return self._claim_token.balance_of(holder)

    def quote(self, asset_in: str, amount_in: int) -> int:
        """Preview a swap's output against current custody without executing it."""
        asset_in_norm = normalize_address(asset_in)
        asset_out = self._counterpart(asset_in_norm)
        with self._lock:
            return self._math.get_amount_out(
                amount_in,
                self._ledger.balance_of(asset_in_norm, self._address),
                self._ledger.balance_of(asset_out, self._address),
            )

    # --- Liquidity ---

    def add_liquidity(self, provider: str, amount_x: int, amount_y: int) -> int:
        """Deposit both assets and mint shares to the provider.

        Into an empty pool the deposit sets the price and mints
        floor(sqrt(amount_x * amount_y)) shares. Into a funded pool the
        deposit must match the reserve ratio exactly and mints shares in
        proportion to the existing supply.

        Args:
            provider: Holder of the deposited assets; receives the shares
            amount_x: Amount of asset_x to deposit
            amount_y: Amount of asset_y to deposit

        Returns:
            Number of shares minted

        Raises:
            InvalidAmount: If either amount is not positive
            InvalidRatio: If a funded-pool deposit deviates from the ratio
            InsufficientSharesMinted: If the deposit rounds to zero shares
            TransferAmountMismatch: If the pool received less than requested
            LedgerError: Allowance or balance failures from the ledger
        """
        _check_amount(amount_x)
        _check_amount(amount_y)
        provider_norm = normalize_address(provider, validate=True)

        # Custody is read under the ledger lock so no transfer lands between
        # pricing and the pull.
        with self._lock, self._ledger.atomic():
            total_shares = self._claim_token.total_supply
            if total_shares == 0:
                shares = self._math.initial_shares(amount_x, amount_y)
            else:
                balance_x, balance_y = self._custody()
                if not self._math.ratio_matches(amount_x, amount_y, balance_x, balance_y):
                    logger.warning(
                        "liquidity_ratio_rejected",
                        pool=self._address[-8:],
                        amount_x=amount_x,
                        amount_y=amount_y,
                        reserve_x=balance_x,
                        reserve_y=balance_y,
                    )
                    raise InvalidRatio(
                        f"Deposit {amount_x}:{amount_y} does not match reserves "
                        f"{balance_x}:{balance_y}"
                    )
                shares = self._math.proportional_shares(amount_x, balance_x, total_shares)
                if shares == 0:
                    raise InsufficientSharesMinted(
                        f"Deposit of {amount_x} mints no shares against reserve {balance_x}"
                    )

            self._pull(self._asset_x, provider_norm, amount_x)
            self._pull(self._asset_y, provider_norm, amount_y)
            self._claim_token.mint(self, provider_norm, shares)
            self._sync_reserves()

            self.events.append(
                LiquidityAdded(
                    provider=provider_norm, amount_x=amount_x, amount_y=amount_y, shares=shares
                )
            )
            logger.info(
                "liquidity_added",
                pool=self._address[-8:],
                provider=provider_norm[-8:],
                amount_x=amount_x,
                amount_y=amount_y,
                shares=shares,
                total_shares=self._claim_token.total_supply,
            )
            return shares

    def remove_liquidity(self, provider: str, shares: int) -> tuple[int, int]:
        """Burn shares and return the proportional part of both reserves.

        Amounts are floored; rounding dust stays with the remaining holders.
        Burning every outstanding share empties the pool completely.

        Returns:
            Tuple of (amount_x_out, amount_y_out)

        Raises:
            InvalidAmount: If shares is not positive
            InsufficientBalance: If the provider holds fewer shares
        """
        _check_amount(shares)
        provider_norm = normalize_address(provider, validate=True)

        with self._lock, self._ledger.atomic():
            held = self._claim_token.balance_of(provider_norm)
            if held < shares:
                raise InsufficientBalance(provider_norm, held, shares)

            total_shares = self._claim_token.total_supply
            balance_x, balance_y = self._custody()
            amount_x, amount_y = self._math.proportional_amounts(
                shares, balance_x, balance_y, total_shares
            )

            if amount_x:
                self._ledger.transfer_out(self._asset_x, self._address, provider_norm, amount_x)
            if amount_y:
                self._ledger.transfer_out(self._asset_y, self._address, provider_norm, amount_y)
            self._claim_token.burn(self, provider_norm, shares)
            self._sync_reserves()

            self.events.append(
                LiquidityRemoved(
                    provider=provider_norm, amount_x=amount_x, amount_y=amount_y, shares=shares
                )
            )
            logger.info(
                "liquidity_removed",
                pool=self._address[-8:],
                provider=provider_norm[-8:],
                amount_x=amount_x,
                amount_y=amount_y,
                shares=shares,
                total_shares=self._claim_token.total_supply,
            )
            return amount_x, amount_y

    # --- Swaps ---

    def swap(
        self,
        trader: str,
        asset_in: str,
        asset_out: str,
        amount_in: int,
        min_amount_out: int = 0,
    ) -> int:
        """Swap an exact input of one asset for the other.

        Priced on the pool's actual balances at call time:
        amount_out = reserve_out * amount_in // (reserve_in + amount_in)

        Args:
            trader: Holder paying asset_in and receiving asset_out
            asset_in: Asset sold to the pool
            asset_out: Asset bought from the pool
            amount_in: Exact amount of asset_in
            min_amount_out: Minimum acceptable output (0 accepts anything)

        Returns:
            Amount of asset_out sent to the trader

        Raises:
            InvalidToken: If the assets are identical or not this pool's pair
            InvalidAmount: If amount_in is not positive
            InsufficientLiquidityForSwap: If either side holds no custody
            SlippageExceeded: If the output is below min_amount_out
            TransferAmountMismatch: If the pool received less than amount_in
        """
        asset_in_norm = normalize_address(asset_in)
        asset_out_norm = normalize_address(asset_out)
        if asset_in_norm == asset_out_norm:
            raise InvalidToken(f"Cannot swap {asset_in_norm} for itself")
        if self._counterpart(asset_in_norm) != asset_out_norm:
            raise InvalidToken(f"Pair {asset_in_norm}/{asset_out_norm} is not traded here")
        _check_amount(amount_in)
        trader_norm = normalize_address(trader, validate=True)

        with self._lock, self._ledger.atomic():
            reserve_in = self._ledger.balance_of(asset_in_norm, self._address)
            reserve_out = self._ledger.balance_of(asset_out_norm, self._address)
            if reserve_in == 0 or reserve_out == 0:
                logger.warning(
                    "swap_rejected_empty_pool",
                    pool=self._address[-8:],
                    reserve_in=reserve_in,
                    reserve_out=reserve_out,
                )
                raise InsufficientLiquidityForSwap(
                    f"Pool {self._address} has reserves {reserve_in}/{reserve_out}"
                )

            amount_out = self._math.get_amount_out(amount_in, reserve_in, reserve_out)
            if amount_out < min_amount_out:
                raise SlippageExceeded(f"Output {amount_out} below minimum {min_amount_out}")

            self._pull(asset_in_norm, trader_norm, amount_in)
            if amount_out:
                self._ledger.transfer_out(asset_out_norm, self._address, trader_norm, amount_out)
            self._sync_reserves()

            self.events.append(
                SwapExecuted(
                    trader=trader_norm,
                    asset_in=asset_in_norm,
                    asset_out=asset_out_norm,
                    amount_in=amount_in,
                    amount_out=amount_out,
                )
            )
            logger.info(
                "swap_executed",
                pool=self._address[-8:],
                trader=trader_norm[-8:],
                asset_in=asset_in_norm[-8:],
                amount_in=amount_in,
                amount_out=amount_out,
                reserve_in_before=reserve_in,
                reserve_out_before=reserve_out,
            )
            return amount_out

    def sync(self) -> tuple[int, int]:
        """Absorb any donated balances into the stored reserves."""
        with self._lock:
            self._sync_reserves()
            logger.debug(
                "reserves_synced",
                pool=self._address[-8:],
                reserve_x=self._reserve_x,
                reserve_y=self._reserve_y,
            )
            return self._reserve_x, self._reserve_y

    # --- Internals ---

    def _counterpart(self, asset: str) -> str:
        if asset == self._asset_x:
            return self._asset_y
        if asset == self._asset_y:
            return self._asset_x
        raise InvalidToken(f"Asset {asset} not in pool {self._address}")

    def _custody(self) -> tuple[int, int]:
        return (
            self._ledger.balance_of(self._asset_x, self._address),
            self._ledger.balance_of(self._asset_y, self._address),
        )

    def _sync_reserves(self) -> None:
        self._reserve_x, self._reserve_y = self._custody()

    def _pull(self, asset: str, sender: str, amount: int) -> None:
        received = self._ledger.transfer_in(asset, sender, self._address, amount)
        if received != amount:
            logger.warning(
                "transfer_amount_mismatch",
                pool=self._address[-8:],
                asset=asset[-8:],
                expected=amount,
                received=received,
            )
            raise TransferAmountMismatch(asset, amount, received)


def _check_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise InvalidAmount(f"Amount must be int, got {type(amount).__name__}")
    if amount <= 0:
        raise InvalidAmount(f"Amount must be positive: {amount}")
    if amount > UINT256_MAX:
        raise InvalidAmount(f"Amount exceeds uint256: {amount}")
