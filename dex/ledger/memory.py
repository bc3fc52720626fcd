"""In-memory multi-asset ledger with ERC-20 semantics.

Balances, allowances and supply for every registered asset live in plain
dicts. Mutations inside `atomic()` are journaled and restored if the block
raises, which gives pool operations all-or-nothing behaviour.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

import structlog

from dex.errors import (
    AssetExists,
    CustodyInUse,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAmount,
    UnknownAsset,
)
from dex.models.types import UINT256_MAX, normalize_address
from dex.safe_int import S

logger = structlog.get_logger()


@dataclass
class AssetState:
    """Ledger state of one asset."""

    name: str
    symbol: str
    # Charged on every transfer and burned (deflationary assets)
    transfer_fee_bps: int = 0
    total_supply: int = 0
    balances: dict[str, int] = field(default_factory=dict)
    # (owner, spender) -> remaining allowance
    allowances: dict[tuple[str, str], int] = field(default_factory=dict)

    def snapshot(self) -> AssetState:
        return AssetState(
            name=self.name,
            symbol=self.symbol,
            transfer_fee_bps=self.transfer_fee_bps,
            total_supply=self.total_supply,
            balances=dict(self.balances),
            allowances=dict(self.allowances),
        )


class InMemoryAssetLedger:
    """Reference AssetLedger keeping every asset in process memory.

    An allowance of UINT256_MAX is treated as unlimited and never decreases.
    """

    def __init__(self) -> None:
        self._assets: dict[str, AssetState] = {}
        # Addresses pools hold custody under; never released
        self._custodians: set[str] = set()
        self._lock = threading.RLock()
        self._depth = 0

    # --- Asset management ---

    def create_asset(
        self,
        address: str,
        name: str,
        symbol: str,
        transfer_fee_bps: int = 0,
    ) -> str:
        """Register an asset and return its normalized address."""
        asset = normalize_address(address, validate=True)
        if not 0 <= transfer_fee_bps < 10_000:
            raise ValueError(f"transfer_fee_bps must be in [0, 10000), got {transfer_fee_bps}")
        with self._lock:
            if asset in self._assets:
                raise AssetExists(f"Asset already registered: {asset}")
            self._assets[asset] = AssetState(
                name=name, symbol=symbol, transfer_fee_bps=transfer_fee_bps
            )
        logger.debug("asset_registered", asset=asset[-8:], symbol=symbol)
        return asset

    def has_asset(self, asset: str) -> bool:
        return normalize_address(asset) in self._assets

    def assets(self) -> list[str]:
        with self._lock:
            return list(self._assets)

    def metadata(self, asset: str) -> tuple[str, str]:
        state = self._state(asset)
        return state.name, state.symbol

    def total_supply(self, asset: str) -> int:
        with self._lock:
            return self._state(asset).total_supply

    def mint(self, asset: str, to: str, amount: int) -> None:
        """Create `amount` new units of `asset` for `to`."""
        _check_amount(amount)
        holder = normalize_address(to)
        with self._lock:
            state = self._state(asset)
            state.balances[holder] = state.balances.get(holder, 0) + amount
            state.total_supply += amount

    # --- ERC-20 operations ---

    def balance_of(self, asset: str, holder: str) -> int:
        with self._lock:
            return self._state(asset).balances.get(normalize_address(holder), 0)

    def allowance(self, asset: str, owner: str, spender: str) -> int:
        with self._lock:
            key = (normalize_address(owner), normalize_address(spender))
            return self._state(asset).allowances.get(key, 0)

    def approve(self, asset: str, owner: str, spender: str, amount: int) -> None:
        _check_amount(amount, allow_zero=True)
        with self._lock:
            key = (normalize_address(owner), normalize_address(spender))
            self._state(asset).allowances[key] = amount

    def transfer(self, asset: str, sender: str, recipient: str, amount: int) -> int:
        """Move `amount` from `sender` to `recipient`.

        Returns:
            Amount credited to `recipient` after any transfer fee
        """
        _check_amount(amount, allow_zero=True)
        with self._lock:
            return self._move(self._state(asset), sender, recipient, amount)

    def transfer_from(
        self, asset: str, spender: str, owner: str, recipient: str, amount: int
    ) -> int:
        """Move `amount` from `owner` to `recipient`, spending `spender`'s allowance."""
        _check_amount(amount, allow_zero=True)
        owner_norm = normalize_address(owner)
        spender_norm = normalize_address(spender)
        with self._lock:
            state = self._state(asset)
            key = (owner_norm, spender_norm)
            current = state.allowances.get(key, 0)
            if current < amount:
                raise InsufficientAllowance(spender_norm, current, amount)
            credited = self._move(state, owner_norm, recipient, amount)
            if current != UINT256_MAX:
                state.allowances[key] = (S(current) - S(amount)).value
            return credited

    # --- AssetLedger protocol ---

    def transfer_in(self, asset: str, sender: str, pool: str, amount: int) -> int:
        # Received amount is measured from the pool's own balance, not trusted
        # from the transfer path.
        with self._lock:
            before = self.balance_of(asset, pool)
            self.transfer_from(asset, spender=pool, owner=sender, recipient=pool, amount=amount)
            return (S(self.balance_of(asset, pool)) - S(before)).value

    def transfer_out(self, asset: str, pool: str, recipient: str, amount: int) -> None:
        self.transfer(asset, pool, recipient, amount)

    def claim_custody(self, holder: str) -> None:
        custodian = normalize_address(holder, validate=True)
        with self._lock:
            if custodian in self._custodians:
                raise CustodyInUse(f"Custody address already claimed: {custodian}")
            self._custodians.add(custodian)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Run a block of ledger mutations all-or-nothing.

        Holds the ledger lock for the whole block. Nested blocks join the
        outermost journal.
        """
        with self._lock:
            if self._depth > 0:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return

            journal = {asset: state.snapshot() for asset, state in self._assets.items()}
            self._depth = 1
            try:
                yield
            except BaseException:
                self._assets = journal
                logger.debug("ledger_rolled_back", assets=len(journal))
                raise
            finally:
                self._depth = 0

    # --- Internals ---

    def _state(self, asset: str) -> AssetState:
        state = self._assets.get(normalize_address(asset))
        if state is None:
            raise UnknownAsset(f"Asset not registered: {asset}")
        return state

    @staticmethod
    def _move(state: AssetState, sender: str, recipient: str, amount: int) -> int:
        sender_norm = normalize_address(sender)
        recipient_norm = normalize_address(recipient)
        balance = state.balances.get(sender_norm, 0)
        if balance < amount:
            raise InsufficientBalance(sender_norm, balance, amount)

        fee = (S(amount) * state.transfer_fee_bps // 10_000).value
        credited = amount - fee
        state.balances[sender_norm] = balance - amount
        state.balances[recipient_norm] = state.balances.get(recipient_norm, 0) + credited
        state.total_supply -= fee
        return credited


def _check_amount(amount: int, *, allow_zero: bool = False) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise InvalidAmount(f"Amount must be int, got {type(amount).__name__}")
    if amount < 0 or (amount == 0 and not allow_zero):
        raise InvalidAmount(f"Amount must be positive: {amount}")
    if amount > UINT256_MAX:
        raise InvalidAmount(f"Amount exceeds uint256: {amount}")
