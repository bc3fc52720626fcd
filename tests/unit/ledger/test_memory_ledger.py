"""Tests for the in-memory asset ledger."""

import pytest

from dex.errors import (
    AssetExists,
    CustodyInUse,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAmount,
    UnknownAsset,
)
from dex.ledger import AssetLedger, InMemoryAssetLedger
from tests.helpers import (
    FEE_TOKEN,
    INITIAL_SUPPLY,
    MAX_UINT256,
    OWNER,
    TOKEN_A,
    TOKEN_B,
    USER1,
    USER2,
    USER_FUNDS,
)

POOL = "0x" + "9" * 40


class TestAssetRegistration:
    """Tests for registering assets."""

    def test_satisfies_protocol(self, ledger):
        assert isinstance(ledger, AssetLedger)

    def test_duplicate_asset_rejected(self, ledger):
        with pytest.raises(AssetExists, match="already registered"):
            ledger.create_asset(TOKEN_A, "Again", "AGN")

    def test_invalid_address_rejected(self):
        with pytest.raises(ValueError):
            InMemoryAssetLedger().create_asset("0x1234", "Short", "SHT")

    def test_unknown_asset_raises(self, ledger):
        with pytest.raises(UnknownAsset):
            ledger.balance_of("0x" + "e" * 40, USER1)

    def test_metadata_and_supply(self, ledger):
        assert ledger.metadata(TOKEN_A) == ("TokenA", "TKA")
        assert ledger.total_supply(TOKEN_A) == INITIAL_SUPPLY

    def test_addresses_are_case_insensitive(self, ledger):
        assert ledger.balance_of(TOKEN_A.upper().replace("0X", "0x"), USER1) == USER_FUNDS


class TestTransfers:
    """Tests for transfer, approve and transfer_from."""

    def test_transfer_moves_balance(self, ledger):
        ledger.transfer(TOKEN_A, USER1, USER2, 100)
        assert ledger.balance_of(TOKEN_A, USER1) == USER_FUNDS - 100
        assert ledger.balance_of(TOKEN_A, USER2) == USER_FUNDS + 100

    def test_transfer_insufficient_balance(self, ledger):
        with pytest.raises(InsufficientBalance):
            ledger.transfer(TOKEN_A, USER1, USER2, USER_FUNDS + 1)

    def test_negative_amount_rejected(self, ledger):
        with pytest.raises(InvalidAmount):
            ledger.transfer(TOKEN_A, USER1, USER2, -1)

    def test_transfer_from_spends_allowance(self, ledger):
        ledger.approve(TOKEN_A, USER1, POOL, 500)
        ledger.transfer_from(TOKEN_A, POOL, USER1, POOL, 200)
        assert ledger.allowance(TOKEN_A, USER1, POOL) == 300
        assert ledger.balance_of(TOKEN_A, POOL) == 200

    def test_max_allowance_is_unlimited(self, ledger):
        ledger.approve(TOKEN_A, USER1, POOL, MAX_UINT256)
        ledger.transfer_from(TOKEN_A, POOL, USER1, POOL, 200)
        assert ledger.allowance(TOKEN_A, USER1, POOL) == MAX_UINT256

    def test_transfer_from_insufficient_allowance(self, ledger):
        ledger.approve(TOKEN_A, USER1, POOL, 50)
        with pytest.raises(InsufficientAllowance) as exc_info:
            ledger.transfer_from(TOKEN_A, POOL, USER1, POOL, 100)
        assert exc_info.value.allowance == 50
        assert exc_info.value.needed == 100

    def test_fee_token_burns_fee(self, ledger):
        """A 1% transfer fee is burned from the moved amount."""
        supply = ledger.total_supply(FEE_TOKEN)
        credited = ledger.transfer(FEE_TOKEN, USER1, USER2, 1000)
        assert credited == 990
        assert ledger.balance_of(FEE_TOKEN, USER2) == USER_FUNDS + 990
        assert ledger.total_supply(FEE_TOKEN) == supply - 10


class TestPoolInterface:
    """Tests for the transfer_in / transfer_out protocol methods."""

    def test_transfer_in_returns_received(self, ledger):
        ledger.approve(TOKEN_A, USER1, POOL, 1000)
        assert ledger.transfer_in(TOKEN_A, USER1, POOL, 1000) == 1000

    def test_transfer_in_reports_fee_shortfall(self, ledger):
        ledger.approve(FEE_TOKEN, USER1, POOL, 1000)
        assert ledger.transfer_in(FEE_TOKEN, USER1, POOL, 1000) == 990

    def test_transfer_out(self, ledger):
        ledger.transfer(TOKEN_B, USER1, POOL, 300)
        ledger.transfer_out(TOKEN_B, POOL, USER2, 300)
        assert ledger.balance_of(TOKEN_B, POOL) == 0
        assert ledger.balance_of(TOKEN_B, USER2) == USER_FUNDS + 300

    def test_custody_claimed_once(self, ledger):
        ledger.claim_custody(POOL)
        with pytest.raises(CustodyInUse):
            ledger.claim_custody(POOL.upper().replace("0X", "0x"))

    def test_custody_claims_are_per_ledger(self, ledger):
        ledger.claim_custody(POOL)
        InMemoryAssetLedger().claim_custody(POOL)


class TestAtomic:
    """Tests for the all-or-nothing journal."""

    def test_commit_on_success(self, ledger):
        with ledger.atomic():
            ledger.transfer(TOKEN_A, USER1, USER2, 10)
        assert ledger.balance_of(TOKEN_A, USER2) == USER_FUNDS + 10

    def test_rollback_on_error(self, ledger):
        """A failure mid-block undoes earlier transfers and allowance spends."""
        ledger.approve(TOKEN_A, USER1, POOL, 100)
        with pytest.raises(InsufficientBalance):
            with ledger.atomic():
                ledger.transfer_from(TOKEN_A, POOL, USER1, POOL, 100)
                ledger.transfer(TOKEN_B, USER1, POOL, USER_FUNDS + 1)
        assert ledger.balance_of(TOKEN_A, POOL) == 0
        assert ledger.balance_of(TOKEN_A, USER1) == USER_FUNDS
        assert ledger.allowance(TOKEN_A, USER1, POOL) == 100

    def test_nested_blocks_roll_back_together(self, ledger):
        with pytest.raises(RuntimeError):
            with ledger.atomic():
                ledger.transfer(TOKEN_A, USER1, USER2, 10)
                with ledger.atomic():
                    ledger.transfer(TOKEN_A, USER1, USER2, 20)
                raise RuntimeError("abort")
        assert ledger.balance_of(TOKEN_A, USER2) == USER_FUNDS

    def test_supply_restored(self, ledger):
        supply = ledger.total_supply(TOKEN_A)
        with pytest.raises(RuntimeError):
            with ledger.atomic():
                ledger.mint(TOKEN_A, OWNER, 1)
                raise RuntimeError("abort")
        assert ledger.total_supply(TOKEN_A) == supply
