"""Error classes for the exchange.

Grouped by the component that raises them. Every error is caller-recoverable
and carries no side effects: either it is raised before any state change, or
the ledger journal rolls the failed operation back.
"""


class DexError(Exception):
    """Base error for exchange operations."""

    pass


# --- Registry ---


class RegistryError(DexError):
    """Base error for pool registry operations."""

    pass


class IdenticalAssets(RegistryError):
    """Both sides of the pair are the same asset."""

    pass


class InvalidAsset(RegistryError):
    """Asset identifier is the zero address or malformed."""

    pass


class PairExists(RegistryError):
    """A pool already exists for this unordered pair."""

    pass


class PoolNotFound(RegistryError):
    """No pool is registered for the pair."""

    pass


# --- Pool ---


class PoolError(DexError):
    """Base error for liquidity pool operations."""

    pass


class InvalidToken(PoolError):
    """Swap assets are identical or do not belong to the pool."""

    pass


class InvalidAmount(PoolError):
    """Amount must be a positive integer within uint256."""

    pass


class InvalidRatio(PoolError):
    """Deposit does not match the pool's reserve ratio exactly."""

    pass


class InsufficientLiquidityForSwap(PoolError):
    """One side of the pool holds no custody."""

    pass


class InsufficientSharesMinted(PoolError):
    """Deposit is too small to mint a single share."""

    pass


class SlippageExceeded(PoolError):
    """Swap output is below the caller's minimum."""

    pass


class TransferAmountMismatch(PoolError):
    """The pool received a different amount than it pulled."""

    def __init__(self, asset: str, expected: int, actual: int) -> None:
        super().__init__(f"Asset {asset}: expected to receive {expected}, received {actual}")
        self.asset = asset
        self.expected = expected
        self.actual = actual


# --- Claim token ---


class OnlyPool(DexError):
    """Mint/burn invoked by someone other than the owning pool."""

    pass


# --- Ledger ---


class LedgerError(DexError):
    """Base error for asset ledger operations."""

    pass


class UnknownAsset(LedgerError):
    """Asset is not registered on the ledger."""

    pass


class AssetExists(LedgerError, ValueError):
    """Asset address is already registered on the ledger."""

    pass


class CustodyInUse(LedgerError):
    """Another pool already holds custody under this address."""

    pass


class InsufficientBalance(LedgerError):
    """Holder balance is lower than the requested amount."""

    def __init__(self, holder: str, balance: int, needed: int) -> None:
        super().__init__(f"{holder} has balance {balance}, needs {needed}")
        self.holder = holder
        self.balance = balance
        self.needed = needed


class InsufficientAllowance(LedgerError):
    """Spender allowance is lower than the requested amount."""

    def __init__(self, spender: str, allowance: int, needed: int) -> None:
        super().__init__(f"{spender} has allowance {allowance}, needs {needed}")
        self.spender = spender
        self.allowance = allowance
        self.needed = needed
