"""
Unit tests for the registry operations.

Tests cover:
1. Listing (duplicates, eager validation)
2. Buying (pricing, fee split, window, payment checks)
3. Delisting (seller only)
4. Withdrawal
5. Atomicity: rejected operations leave no trace
6. Balance accumulation and the legacy ledger mode
"""

import pytest

from dutchx.core.config import EngineConfig
from dutchx.core.errors import (
    AuctionWindowViolation,
    DuplicateCredit,
    DuplicateListing,
    InsufficientPayment,
    InvalidPrice,
    InvalidWindow,
    NoBalance,
    NoSuchAuction,
    NotOwner,
)
from dutchx.core.escrow import Collectible, TransferableAsset
from dutchx.core.host import ManualClock
from dutchx.core.registry import ESCROW_ADDRESS, Registry, compute_fee, create_registry
from dutchx.core.state import Coin


PLATFORM = b"\xfe" * 20
SELLER = b"\x5e" * 20
BUYER = b"\xb0" * 20
STRANGER = b"\x99" * 20


class RefusingAsset(TransferableAsset):
    """Accepts escrow custody, then refuses delivery to anyone else."""

    def __init__(self, asset_id: bytes):
        self.asset_id = asset_id
        self.holders = []

    def on_transfer(self, holder: bytes) -> None:
        if self.holders:
            raise RuntimeError("delivery refused")
        self.holders.append(holder)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def registry():
    """Registry with a 5% fee."""
    return create_registry(5, PLATFORM)


@pytest.fixture
def item():
    return Collectible(asset_id=b"painting-1", metadata={"name": "Painting"})


@pytest.fixture
def listed(registry, item):
    """Registry with `item` listed over [1000, 2000], 200 -> 100."""
    registry.list_asset(item, 1000, 2000, 200, 100, SELLER)
    return registry, item


def state_of(registry: Registry) -> tuple:
    """Observable state for before/after comparisons."""
    return (
        dict(registry.auctions.auctions),
        dict(registry.balances.balances),
        list(registry.receipts),
    )


# =============================================================================
# Creation
# =============================================================================


class TestCreate:
    """Tests for registry construction."""

    def test_create(self, registry):
        assert registry.fee_percent == 5
        assert registry.proceeds_recipient == PLATFORM
        assert len(registry.auctions) == 0

    @pytest.mark.parametrize("fee", [-1, 101])
    def test_fee_out_of_range(self, fee):
        with pytest.raises(ValueError):
            create_registry(fee, PLATFORM)

    def test_bad_recipient(self):
        with pytest.raises(ValueError):
            create_registry(5, b"short")

    def test_from_config(self):
        config = EngineConfig(fee_percent=7, proceeds_recipient=PLATFORM)
        registry = Registry.from_config(config)
        assert registry.fee_percent == 7
        assert registry.config is config

    def test_arguments_override_config(self):
        """Explicit fee and recipient win; the other options are kept."""
        config = EngineConfig(
            fee_percent=7,
            proceeds_recipient=STRANGER,
            legacy_reject_duplicate_credit=True,
        )
        registry = create_registry(3, PLATFORM, config=config)

        assert registry.config.fee_percent == 3
        assert registry.config.proceeds_recipient == PLATFORM
        assert registry.config.legacy_reject_duplicate_credit is True
        assert registry.balances.reject_duplicate_credit is True
        assert config.fee_percent == 7


# =============================================================================
# Listing
# =============================================================================


class TestList:
    """Tests for listing assets."""

    def test_list_escrows_asset(self, listed):
        registry, item = listed
        auction = registry.get_auction(item.asset_id)

        assert registry.has_auction(item.asset_id)
        assert auction.seller == SELLER
        assert auction.escrow.peek() is item
        assert item.holder == ESCROW_ADDRESS

    def test_duplicate_listing(self, listed):
        """Second listing of the same id should fail and leave the first intact."""
        registry, item = listed
        first = registry.get_auction(item.asset_id)
        twin = Collectible(asset_id=item.asset_id)

        with pytest.raises(DuplicateListing):
            registry.list_asset(twin, 0, 10, 5, 1, STRANGER)

        assert registry.get_auction(item.asset_id) is first
        assert first.seller == SELLER
        assert first.escrow.peek() is item
        assert twin.holder is None

    def test_zero_window_rejected(self, registry, item):
        with pytest.raises(InvalidWindow):
            registry.list_asset(item, 1000, 1000, 200, 100, SELLER)
        assert not registry.has_auction(item.asset_id)
        assert item.holder is None

    def test_inverted_window_rejected(self, registry, item):
        with pytest.raises(InvalidWindow):
            registry.list_asset(item, 2000, 1000, 200, 100, SELLER)

    def test_negative_price_rejected(self, registry, item):
        with pytest.raises(InvalidPrice):
            registry.list_asset(item, 1000, 2000, -1, 100, SELLER)

    def test_unvalidated_listing_fails_at_buy(self, item):
        """With listing validation off, a zero window fails when priced."""
        config = EngineConfig(validate_on_list=False, proceeds_recipient=PLATFORM)
        registry = Registry.from_config(config)
        registry.list_asset(item, 1000, 1000, 200, 100, SELLER)

        with pytest.raises(InvalidWindow):
            registry.buy(item.asset_id, 500, BUYER, now=1000)

        assert registry.has_auction(item.asset_id)
        assert registry.balance_of(SELLER) == 0

    def test_bad_caller(self, registry, item):
        with pytest.raises(ValueError):
            registry.list_asset(item, 1000, 2000, 200, 100, b"nope")


# =============================================================================
# Buying
# =============================================================================


class TestBuy:
    """Tests for purchase and settlement."""

    def test_worked_example(self, listed):
        """fee 5%, paid 150 at t=1500: fee 7, seller credit 143."""
        registry, item = listed

        bought = registry.buy(item.asset_id, 150, BUYER, now=1500)

        assert bought is item
        assert item.holder == BUYER
        assert not registry.has_auction(item.asset_id)
        assert registry.balance_of(SELLER) == 143
        assert registry.balance_of(PLATFORM) == 7

    def test_receipt(self, listed):
        registry, item = listed
        registry.buy(item.asset_id, 150, BUYER, now=1500)

        receipt = registry.last_receipt
        assert receipt.asset_id == item.asset_id
        assert receipt.seller == SELLER
        assert receipt.buyer == BUYER
        assert receipt.price == 150
        assert receipt.paid == 150
        assert receipt.fee == 7
        assert receipt.seller_credit == 143
        assert receipt.seller_credit + receipt.fee == receipt.paid
        assert receipt.timestamp == 1500

    def test_insufficient_payment(self, listed):
        """Paying 120 when the price is 150 should fail with no state change."""
        registry, item = listed
        before = state_of(registry)

        with pytest.raises(InsufficientPayment) as exc:
            registry.buy(item.asset_id, 120, BUYER, now=1500)

        assert exc.value.expected == 150
        assert exc.value.paid == 120
        assert state_of(registry) == before
        assert registry.get_auction(item.asset_id).escrow.peek() is item
        assert item.holder == ESCROW_ADDRESS

    @pytest.mark.parametrize("now", [999, 2001])
    def test_outside_window(self, listed, now):
        registry, item = listed
        before = state_of(registry)

        with pytest.raises(AuctionWindowViolation):
            registry.buy(item.asset_id, 1000, BUYER, now=now)

        assert state_of(registry) == before

    def test_no_such_auction(self, registry):
        with pytest.raises(NoSuchAuction):
            registry.buy(b"missing", 100, BUYER, now=1500)

    def test_overpayment_is_split(self, listed):
        """Fee is taken from the amount paid, not the price."""
        registry, item = listed
        registry.buy(item.asset_id, 200, BUYER, now=1500)

        assert registry.balance_of(PLATFORM) == 10
        assert registry.balance_of(SELLER) == 190

    def test_pay_with_coin(self, listed):
        registry, item = listed
        registry.buy(item.asset_id, Coin(150), BUYER, now=1500)
        assert registry.balance_of(SELLER) == 143

    def test_zero_fee(self, item):
        registry = create_registry(0, PLATFORM)
        registry.list_asset(item, 1000, 2000, 200, 100, SELLER)
        registry.buy(item.asset_id, 150, BUYER, now=1500)

        assert registry.balance_of(SELLER) == 150
        assert registry.withdraw(PLATFORM) == Coin(0)
        with pytest.raises(NoBalance):
            registry.withdraw(PLATFORM)

    def test_full_fee(self, item):
        registry = create_registry(100, PLATFORM)
        registry.list_asset(item, 1000, 2000, 200, 100, SELLER)
        registry.buy(item.asset_id, 150, BUYER, now=1500)

        assert registry.balance_of(PLATFORM) == 150
        assert registry.balance_of(SELLER) == 0
        assert registry.withdraw(SELLER).value == 0

    def test_buy_at_window_edges(self, registry):
        a = Collectible(asset_id=b"a")
        b = Collectible(asset_id=b"b")
        registry.list_asset(a, 1000, 2000, 200, 100, SELLER)
        registry.list_asset(b, 1000, 2000, 200, 100, SELLER)

        with pytest.raises(InsufficientPayment):
            registry.buy(a.asset_id, 199, BUYER, now=1000)
        registry.buy(a.asset_id, 200, BUYER, now=1000)
        registry.buy(b.asset_id, 100, BUYER, now=2000)

        assert registry.balance_of(SELLER) == 190 + 95

    def test_uses_clock(self, item):
        clock = ManualClock(start=1500)
        registry = create_registry(5, PLATFORM, clock=clock)
        registry.list_asset(item, 1000, 2000, 200, 100, SELLER)

        assert registry.quote(item.asset_id) == 150
        clock.set(1600)
        with pytest.raises(InsufficientPayment):
            registry.buy(item.asset_id, 139, BUYER)
        registry.buy(item.asset_id, 140, BUYER)

    def test_no_time_source(self, listed):
        registry, item = listed
        before = state_of(registry)

        with pytest.raises(ValueError):
            registry.buy(item.asset_id, 150, BUYER)
        assert state_of(registry) == before

    @pytest.mark.parametrize("now", [1500.5, "1500", True, -1])
    def test_bad_timestamp(self, listed, now):
        """Non-integer or negative times are rejected before pricing."""
        registry, item = listed
        before = state_of(registry)

        with pytest.raises(ValueError, match="now"):
            registry.buy(item.asset_id, 150, BUYER, now=now)

        assert state_of(registry) == before
        assert registry.get_auction(item.asset_id).escrow.peek() is item

    def test_quote_bad_timestamp(self, listed):
        registry, item = listed
        with pytest.raises(ValueError, match="now"):
            registry.quote(item.asset_id, now=1500.5)

    def test_failed_transfer_keeps_auction(self, registry):
        """If the asset refuses delivery, the auction and its escrow survive."""
        asset = RefusingAsset(b"fragile")
        registry.list_asset(asset, 1000, 2000, 200, 100, SELLER)
        auction = registry.get_auction(asset.asset_id)
        before = state_of(registry)

        with pytest.raises(RuntimeError):
            registry.buy(asset.asset_id, 150, BUYER, now=1500)

        assert state_of(registry) == before
        assert registry.get_auction(asset.asset_id) is auction
        assert not auction.escrow.is_empty
        assert auction.escrow.peek() is asset
        assert asset.holders == [ESCROW_ADDRESS]

    def test_seller_can_buy_own_asset(self, listed):
        registry, item = listed
        registry.buy(item.asset_id, 150, SELLER, now=1500)
        assert item.holder == SELLER
        assert registry.balance_of(SELLER) == 143

    def test_compute_fee(self):
        assert compute_fee(150, 5) == 7
        assert compute_fee(19, 5) == 0
        assert compute_fee(20, 5) == 1


# =============================================================================
# Delisting
# =============================================================================


class TestDelist:
    """Tests for seller cancellation."""

    def test_seller_delists(self, listed):
        registry, item = listed

        returned = registry.delist(item.asset_id, SELLER)

        assert returned is item
        assert item.holder == SELLER
        assert not registry.has_auction(item.asset_id)
        assert len(registry.balances) == 0

    def test_non_seller_rejected(self, listed):
        """Non-seller delist should fail and leave the auction intact."""
        registry, item = listed
        auction = registry.get_auction(item.asset_id)
        before = state_of(registry)

        with pytest.raises(NotOwner):
            registry.delist(item.asset_id, STRANGER)

        assert state_of(registry) == before
        assert registry.get_auction(item.asset_id) is auction
        assert auction.escrow.peek() is item

    def test_missing(self, registry):
        with pytest.raises(NoSuchAuction):
            registry.delist(b"missing", SELLER)

    def test_relist_after_delist(self, listed):
        registry, item = listed
        registry.delist(item.asset_id, SELLER)
        registry.list_asset(item, 3000, 4000, 50, 10, SELLER)
        assert registry.quote(item.asset_id, now=3000) == 50


# =============================================================================
# Withdrawal
# =============================================================================


class TestWithdraw:
    """Tests for pulling ledger balances."""

    def test_no_balance(self, registry):
        with pytest.raises(NoBalance):
            registry.withdraw(SELLER)

    def test_withdraw_after_sale(self, listed):
        registry, item = listed
        registry.buy(item.asset_id, 150, BUYER, now=1500)

        assert registry.withdraw(SELLER) == Coin(143)
        assert registry.withdraw(PLATFORM) == Coin(7)

        with pytest.raises(NoBalance):
            registry.withdraw(SELLER)

    def test_accumulation(self, registry):
        """Two sales before withdrawal should sum the seller credits."""
        first = Collectible(asset_id=b"first")
        second = Collectible(asset_id=b"second")
        registry.list_asset(first, 1000, 2000, 200, 100, SELLER)
        registry.list_asset(second, 1000, 2000, 200, 100, SELLER)

        registry.buy(first.asset_id, 150, BUYER, now=1500)
        registry.buy(second.asset_id, 100, STRANGER, now=2000)

        assert registry.balance_of(SELLER) == 143 + 95
        assert registry.balance_of(PLATFORM) == 7 + 5
        assert registry.withdraw(SELLER).value == 238

    def test_legacy_mode_rejects_second_sale(self):
        """Legacy ledger mode rolls back a sale that would double-credit."""
        config = EngineConfig(
            fee_percent=5,
            proceeds_recipient=PLATFORM,
            legacy_reject_duplicate_credit=True,
        )
        registry = Registry.from_config(config)
        first = Collectible(asset_id=b"first")
        second = Collectible(asset_id=b"second")
        registry.list_asset(first, 1000, 2000, 200, 100, SELLER)
        registry.list_asset(second, 1000, 2000, 200, 100, SELLER)
        registry.buy(first.asset_id, 150, BUYER, now=1500)
        before = state_of(registry)

        with pytest.raises(DuplicateCredit):
            registry.buy(second.asset_id, 150, BUYER, now=1500)

        assert state_of(registry) == before
        assert second.holder == ESCROW_ADDRESS

        registry.withdraw(SELLER)
        registry.withdraw(PLATFORM)
        registry.buy(second.asset_id, 150, BUYER, now=1500)
        assert registry.balance_of(SELLER) == 143


# =============================================================================
# Queries
# =============================================================================


class TestQueries:
    """Tests for read-only accessors."""

    def test_quote(self, listed):
        registry, item = listed
        assert registry.quote(item.asset_id, now=1500) == 150

    def test_quote_missing(self, registry):
        with pytest.raises(NoSuchAuction):
            registry.quote(b"missing", now=1500)

    def test_stats(self, listed):
        registry, item = listed
        registry.buy(item.asset_id, 150, BUYER, now=1500)

        stats = registry.stats()
        assert stats["active_auctions"] == 0
        assert stats["settlements"] == 1
        assert stats["total_paid"] == 150
        assert stats["total_fees"] == 7
        assert stats["ledger_outstanding"] == 150


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
