"""Test helpers module for shared test utilities.

- constants: Asset and holder addresses, common amounts
- factories: Ledger and approval factory functions
"""

from tests.helpers.constants import (
    ETHER,
    FEE_TOKEN,
    INITIAL_SUPPLY,
    MAX_UINT256,
    OWNER,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    USER1,
    USER2,
    USER_FUNDS,
    ZERO,
)
from tests.helpers.factories import approve_all, make_ledger

__all__ = [
    # Constants
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    "FEE_TOKEN",
    "ZERO",
    "OWNER",
    "USER1",
    "USER2",
    "ETHER",
    "INITIAL_SUPPLY",
    "USER_FUNDS",
    "MAX_UINT256",
    # Factories
    "make_ledger",
    "approve_all",
]
