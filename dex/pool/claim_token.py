"""Claim token: the share ledger of a single pool."""

from __future__ import annotations

import threading
from typing import Protocol

import structlog

from dex.errors import InsufficientBalance, InvalidAmount, OnlyPool
from dex.models.types import UINT256_MAX, normalize_address
from dex.safe_int import S

logger = structlog.get_logger()

DEFAULT_NAME = "LP Token"
DEFAULT_SYMBOL = "LP"


class TokenOwner(Protocol):
    """The object allowed to mint and burn a claim token."""

    @property
    def address(self) -> str: ...


class ClaimToken:
    """Fungible ownership shares of one LiquidityPool.

    Only the owner object given at construction may mint or burn: callers
    pass themselves and are compared by identity, never by address.
    Holders may move their own shares with `transfer`.

    Invariant: total_supply == sum(balances).
    """

    def __init__(
        self,
        address: str,
        owner: TokenOwner,
        name: str = DEFAULT_NAME,
        symbol: str = DEFAULT_SYMBOL,
    ) -> None:
        self._address = normalize_address(address, validate=True)
        self._owner = owner
        self._pool = normalize_address(owner.address, validate=True)
        self._name = name
        self._symbol = symbol
        self._balances: dict[str, int] = {}
        self._total_supply = 0
        self._lock = threading.RLock()

    @property
    def address(self) -> str:
        return self._address

    @property
    def pool(self) -> str:
        """Address of the owning pool."""
        return self._pool

    @property
    def name(self) -> str:
        return self._name

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, holder: str) -> int:
        return self._balances.get(normalize_address(holder), 0)

    def holders(self) -> dict[str, int]:
        """Snapshot of every non-zero balance."""
        with self._lock:
            return {h: b for h, b in self._balances.items() if b > 0}

    def mint(self, caller: object, to: str, amount: int) -> None:
        """Create shares for `to`.

        Raises:
            OnlyPool: If caller is not the owning pool object
        """
        self._require_pool(caller, "mint")
        _check_positive(amount)
        holder = normalize_address(to)
        with self._lock:
            new_supply = (S(self._total_supply) + S(amount)).to_uint256()
            self._balances[holder] = self._balances.get(holder, 0) + amount
            self._total_supply = new_supply

    def burn(self, caller: object, holder: str, amount: int) -> None:
        """Destroy shares held by `holder`.

        Raises:
            OnlyPool: If caller is not the owning pool object
            InsufficientBalance: If holder owns fewer than `amount` shares
        """
        self._require_pool(caller, "burn")
        _check_positive(amount)
        holder_norm = normalize_address(holder)
        with self._lock:
            balance = self._balances.get(holder_norm, 0)
            if balance < amount:
                raise InsufficientBalance(holder_norm, balance, amount)
            self._balances[holder_norm] = balance - amount
            self._total_supply = (S(self._total_supply) - S(amount)).value

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """Move shares between holders."""
        _check_positive(amount)
        sender_norm = normalize_address(sender)
        recipient_norm = normalize_address(recipient)
        with self._lock:
            balance = self._balances.get(sender_norm, 0)
            if balance < amount:
                raise InsufficientBalance(sender_norm, balance, amount)
            self._balances[sender_norm] = balance - amount
            self._balances[recipient_norm] = self._balances.get(recipient_norm, 0) + amount

    def _require_pool(self, caller: object, action: str) -> None:
        if caller is not self._owner:
            logger.warning(
                "claim_token_unauthorized",
                action=action,
                caller=type(caller).__name__,
                token=self._address[-8:],
            )
            raise OnlyPool(f"Only pool {self._pool} may {action} {self._symbol}")


def _check_positive(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
        raise InvalidAmount(f"Share amount must be a positive int: {amount!r}")
    if amount > UINT256_MAX:
        raise InvalidAmount(f"Share amount exceeds uint256: {amount}")
