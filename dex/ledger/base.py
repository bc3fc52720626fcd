"""Interface the pools require from the asset ledger."""

from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable


@runtime_checkable
class AssetLedger(Protocol):
    """Protocol for the fungible-balance ledger that holds pool custody.

    The pool never moves assets any other way. Implementations raise a
    LedgerError subclass (e.g. InsufficientAllowance) on failure; the pool
    propagates those unmodified.
    """

    def balance_of(self, asset: str, holder: str) -> int:
        """Current balance of `asset` held by `holder`."""
        ...

    def transfer_in(self, asset: str, sender: str, pool: str, amount: int) -> int:
        """Pull `amount` of `asset` from `sender` into `pool`.

        The pool acts as the spender, so `sender` must have approved it.

        Returns:
            The amount the pool actually received, which may be lower than
            `amount` for assets that charge on transfer.
        """
        ...

    def transfer_out(self, asset: str, pool: str, recipient: str, amount: int) -> None:
        """Push `amount` of `asset` from `pool` to `recipient`."""
        ...

    def claim_custody(self, holder: str) -> None:
        """Reserve `holder` as the custody address of exactly one pool.

        Raises:
            CustodyInUse: If the address was already claimed
        """
        ...

    def atomic(self) -> AbstractContextManager[None]:
        """Context in which all transfers commit together or not at all."""
        ...
