"""Shared type definitions for pool identities and amounts.

Every participant (holders, assets, pools, claim tokens, the registry) is
identified by a 20-byte address written as 0x-prefixed hex.
"""

import hashlib
from typing import Annotated, Any

from eth_abi import encode  # type: ignore[attr-defined]
from pydantic import BeforeValidator, Field

# Maximum uint256 value
UINT256_MAX = 2**256 - 1

# Null sentinel for asset identifiers
ZERO_ADDRESS = "0x" + "00" * 20


def validate_uint256(value: Any) -> str:
    """Validate that a value is a valid uint256 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid uint256 as decimal string

    Raises:
        ValueError: If value is not a non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint256 must be string or int, got bool")
    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")
    return str(int_value)


# Address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# 256-bit unsigned integer as decimal string (validated)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an address to lowercase with a 0x prefix.

    Args:
        address: An address (with or without 0x prefix)
        validate: If True, raises ValueError for invalid addresses.

    Returns:
        Lowercase address with 0x prefix

    Raises:
        ValueError: If address is not a string, or validate=True and it is
            not a valid address
    """
    if not isinstance(address, str):
        raise ValueError(f"Address must be a string, got {type(address).__name__}")
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a well-formed 20-byte hex address."""
    if not isinstance(address, str):
        return False
    if not address.startswith("0x"):
        return False
    if len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


def is_zero_address(address: str) -> bool:
    """True if the address is the null sentinel."""
    return normalize_address(address) == ZERO_ADDRESS


def derive_address(deployer: str, salt: bytes) -> str:
    """Derive a deterministic address from a deployer and a salt.

    The address is the low 20 bytes of sha256(deployer || salt), so the same
    deployer and salt always produce the same identity.
    """
    digest = hashlib.sha256(bytes.fromhex(normalize_address(deployer)[2:]) + salt).hexdigest()
    return "0x" + digest[-40:]


def pair_salt(token0: str, token1: str) -> bytes:
    """ABI-encode a canonical (token0, token1) pair for address derivation."""
    return encode(["address", "address"], [normalize_address(token0), normalize_address(token1)])
