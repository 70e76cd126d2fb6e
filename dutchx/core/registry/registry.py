"""
Registry - shared settlement state and the four public operations.

Conceptual Background:
---------------------
The registry is the single mutable resource of the engine. It owns:

1. **AuctionBook**: live auctions keyed by asset id, each owning the
   escrow slot that holds the asset for sale
2. **BalanceLedger**: withdrawable proceeds per beneficiary
3. **Settlement history**: one receipt per completed sale

Operations:
----------
- list_asset: escrow an asset and open an auction for it
- buy: pay at least the current price, receive the asset
- delist: seller cancels and takes the asset back
- withdraw: beneficiary drains its ledger balance

Atomicity:
---------
Every operation runs under one re-entrant lock and inside a staged
transaction: the book and ledger are snapshotted on entry and restored if
anything raises, so a rejected operation leaves no observable trace.
The escrow release is always the final step, taken only after every
precondition has passed.
"""

import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import List, Optional, Union

from dutchx.core.auction import Auction, AuctionBook
from dutchx.core.config import EngineConfig
from dutchx.core.errors import (
    AuctionError,
    AuctionWindowViolation,
    DuplicateListing,
    InsufficientPayment,
    InvalidPrice,
    NoSuchAuction,
    NotOwner,
)
from dutchx.core.escrow import EscrowSlot, TransferableAsset
from dutchx.core.host import Clock, resolve_now
from dutchx.core.pricing import check_window
from dutchx.core.state import BalanceLedger, Coin, as_coin
from dutchx.crypto import bytes_to_hex, keccak256, sha256, short_hex
from dutchx.utils.logger import get_logger
from dutchx.utils.validation import (
    require,
    validate_address,
    validate_amount,
    validate_fee_percent,
    validate_timestamp,
)

logger = get_logger("registry")

# Address recorded as the holder of assets while they sit in escrow
ESCROW_ADDRESS = keccak256(b"dutchx.escrow")[-20:]


# =============================================================================
# Settlement Receipt
# =============================================================================


@dataclass(frozen=True)
class SettlementReceipt:
    """
    Record of one completed sale.

    Invariant: seller_credit + fee == paid
    """
    receipt_id: bytes
    asset_id: bytes
    seller: bytes
    buyer: bytes
    price: int           # Ask price at the time of sale
    paid: int            # Amount actually paid
    fee: int             # Platform share of `paid`
    seller_credit: int   # Seller share of `paid`
    timestamp: int

    def to_dict(self) -> dict:
        return {
            "receipt_id": bytes_to_hex(self.receipt_id),
            "asset_id": bytes_to_hex(self.asset_id),
            "seller": bytes_to_hex(self.seller),
            "buyer": bytes_to_hex(self.buyer),
            "price": self.price,
            "paid": self.paid,
            "fee": self.fee,
            "seller_credit": self.seller_credit,
            "timestamp": self.timestamp,
        }


def compute_fee(paid: int, fee_percent: int) -> int:
    """Platform fee on the amount actually paid, rounded down."""
    return paid * fee_percent // 100


# =============================================================================
# Registry
# =============================================================================


class Registry:
    """
    Top-level shared state of the auction engine.

    Attributes:
        fee_percent: Platform fee, percent of each payment
        proceeds_recipient: Address credited with platform fees
        auctions: Live auctions by asset id
        balances: Withdrawable balances by address
        receipts: Completed settlements, oldest first
    """

    def __init__(
        self,
        fee_percent: int,
        proceeds_recipient: bytes,
        config: Optional[EngineConfig] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize the registry.

        Args:
            fee_percent: Platform fee in [0, 100]
            proceeds_recipient: 20-byte address receiving fees
            config: Engine options (ledger mode, listing validation)
            clock: Timestamp source used when buy() gets no explicit time
        """
        require(
            validate_fee_percent(fee_percent),
            validate_address(proceeds_recipient, "proceeds_recipient"),
        )
        self.fee_percent = fee_percent
        self.proceeds_recipient = bytes(proceeds_recipient)

        # Explicit arguments override the settlement fields of `config`
        config = config or EngineConfig()
        if (config.fee_percent, config.proceeds_recipient) != (fee_percent, self.proceeds_recipient):
            config = replace(
                config, fee_percent=fee_percent, proceeds_recipient=self.proceeds_recipient
            )
        self.config = config
        self.clock = clock

        self.auctions = AuctionBook()
        self.balances = BalanceLedger(
            reject_duplicate_credit=self.config.legacy_reject_duplicate_credit
        )
        self.receipts: List[SettlementReceipt] = []

        self._lock = threading.RLock()

        logger.info(
            f"Registry initialized: fee={fee_percent}%, "
            f"proceeds_recipient={short_hex(self.proceeds_recipient)}"
        )

    @classmethod
    def from_config(cls, config: EngineConfig, clock: Optional[Clock] = None) -> "Registry":
        """Build a registry from an EngineConfig."""
        return cls(config.fee_percent, config.proceeds_recipient, config=config, clock=clock)

    # =========================================================================
    # Transactions
    # =========================================================================

    @contextmanager
    def _transaction(self, operation: str):
        """
        Run a block as one atomic registry operation.

        Holds the registry lock for the duration; on any exception the
        book, ledger and receipt history are restored before re-raising.
        """
        with self._lock:
            book_snapshot = self.auctions.snapshot()
            ledger_snapshot = self.balances.snapshot()
            receipt_count = len(self.receipts)
            try:
                yield
            except AuctionError as e:
                self._rollback(book_snapshot, ledger_snapshot, receipt_count)
                logger.warning(f"{operation} rejected: {e}")
                raise
            except Exception:
                self._rollback(book_snapshot, ledger_snapshot, receipt_count)
                logger.exception(f"{operation} failed, state rolled back")
                raise

    def _rollback(self, book_snapshot, ledger_snapshot, receipt_count: int) -> None:
        self.auctions.restore(book_snapshot)
        self.balances.restore(ledger_snapshot)
        del self.receipts[receipt_count:]

    # =========================================================================
    # Listing
    # =========================================================================

    def list_asset(
        self,
        asset: TransferableAsset,
        time_start: int,
        time_end: int,
        price_start: int,
        price_end: int,
        caller: bytes,
    ) -> None:
        """
        Escrow `asset` and open a Dutch auction for it.

        Args:
            asset: Asset to sell (taken into escrow on success only)
            time_start: Window start
            time_end: Window end
            price_start: Ask price at time_start
            price_end: Ask price at time_end
            caller: Seller address

        Raises:
            DuplicateListing: the asset id already has a live auction
            InvalidWindow: time_start >= time_end (when validate_on_list)
            InvalidPrice: negative price (when validate_on_list)
        """
        require(
            validate_address(caller, "caller"),
            validate_timestamp(time_start, "time_start"),
            validate_timestamp(time_end, "time_end"),
        )
        seller = bytes(caller)

        with self._transaction("list"):
            if self.config.validate_on_list:
                check_window(time_start, time_end)
                if price_start < 0 or price_end < 0:
                    raise InvalidPrice(price_start, price_end)

            # Checked before the slot takes custody so a rejected asset
            # stays untouched with the caller.
            if asset.asset_id in self.auctions:
                raise DuplicateListing(asset.asset_id)

            auction = Auction(
                seller=seller,
                time_start=time_start,
                time_end=time_end,
                price_start=price_start,
                price_end=price_end,
                escrow=EscrowSlot(asset, custodian=ESCROW_ADDRESS),
            )
            self.auctions.insert(auction)

        logger.info(
            f"Listed asset {short_hex(asset.asset_id)}: seller={short_hex(seller)}, "
            f"window=[{time_start}, {time_end}], price={price_start}->{price_end}"
        )

    # =========================================================================
    # Delisting
    # =========================================================================

    def delist(self, asset_id: bytes, caller: bytes) -> TransferableAsset:
        """
        Cancel an auction and return the asset to its seller.

        Raises:
            NoSuchAuction: no live auction for asset_id
            NotOwner: caller is not the seller (auction left intact)
        """
        require(validate_address(caller, "caller"))
        caller = bytes(caller)

        with self._transaction("delist"):
            auction = self.auctions.remove(asset_id)
            if not auction.is_seller(caller):
                raise NotOwner(asset_id, caller)
            asset = auction.escrow.release(caller)

        logger.info(f"Delisted asset {short_hex(asset_id)} by seller {short_hex(caller)}")
        return asset

    # =========================================================================
    # Purchase / Settlement
    # =========================================================================

    def buy(
        self,
        asset_id: bytes,
        paid: Union[Coin, int],
        caller: bytes,
        now: Optional[int] = None,
    ) -> TransferableAsset:
        """
        Buy the asset at (or above) the current ask price.

        The platform fee is a percentage of the amount actually paid, so
        an overpayment is split between seller and fee recipient rather
        than refunded.

        Args:
            asset_id: Asset to buy
            paid: Payment (Coin or integer amount)
            caller: Buyer address
            now: Current time; taken from the registry clock if omitted

        Returns:
            The purchased asset

        Raises:
            NoSuchAuction: no live auction for asset_id
            AuctionWindowViolation: now outside the auction window
            InsufficientPayment: paid below the current price
        """
        require(validate_address(caller, "caller"))
        payment = as_coin(paid)
        require(validate_amount(payment.value, "paid"))
        buyer = bytes(caller)

        with self._transaction("buy"):
            now = resolve_now(now, self.clock)
            require(validate_timestamp(now, "now"))

            auction = self.auctions.remove(asset_id)
            if not auction.is_open(now):
                raise AuctionWindowViolation(now, auction.time_start, auction.time_end)

            price = auction.price_at(now)
            if payment.value < price:
                raise InsufficientPayment(payment.value, price)

            fee = compute_fee(payment.value, self.fee_percent)
            seller_coin, fee_coin = payment.split(fee)

            self.balances.credit(auction.seller, seller_coin)
            self.balances.credit(self.proceeds_recipient, fee_coin)

            receipt = SettlementReceipt(
                receipt_id=self._receipt_id(asset_id, buyer, now),
                asset_id=asset_id,
                seller=auction.seller,
                buyer=buyer,
                price=price,
                paid=payment.value,
                fee=fee_coin.value,
                seller_credit=seller_coin.value,
                timestamp=now,
            )
            self.receipts.append(receipt)

            asset = auction.escrow.release(buyer)

        logger.info(
            f"Sold asset {short_hex(asset_id)}: buyer={short_hex(buyer)}, price={price}, "
            f"paid={receipt.paid}, fee={receipt.fee}, seller_credit={receipt.seller_credit}"
        )
        return asset

    def _receipt_id(self, asset_id: bytes, buyer: bytes, now: int) -> bytes:
        sequence = len(self.receipts).to_bytes(8, byteorder="big")
        return sha256(asset_id + buyer + now.to_bytes(8, byteorder="big") + sequence)

    # =========================================================================
    # Withdrawal
    # =========================================================================

    def withdraw(self, caller: bytes) -> Coin:
        """
        Drain the caller's ledger balance.

        Raises:
            NoBalance: caller has no balance
        """
        require(validate_address(caller, "caller"))
        caller = bytes(caller)

        with self._transaction("withdraw"):
            coin = self.balances.withdraw(caller)

        logger.info(f"Withdrawal by {short_hex(caller)}: amount={coin.value}")
        return coin

    # =========================================================================
    # Queries
    # =========================================================================

    def get_auction(self, asset_id: bytes) -> Optional[Auction]:
        with self._lock:
            return self.auctions.get(asset_id)

    def has_auction(self, asset_id: bytes) -> bool:
        with self._lock:
            return asset_id in self.auctions

    def balance_of(self, address: bytes) -> int:
        with self._lock:
            return self.balances.balance_of(address)

    def quote(self, asset_id: bytes, now: Optional[int] = None) -> int:
        """
        Current ask price of a live auction.

        Raises:
            NoSuchAuction, InvalidWindow, AuctionWindowViolation
        """
        with self._lock:
            auction = self.auctions.get(asset_id)
            if auction is None:
                raise NoSuchAuction(asset_id)
            now = resolve_now(now, self.clock)
            require(validate_timestamp(now, "now"))
            return auction.price_at(now)

    @property
    def last_receipt(self) -> Optional[SettlementReceipt]:
        with self._lock:
            return self.receipts[-1] if self.receipts else None

    # =========================================================================
    # Utility
    # =========================================================================

    def __repr__(self) -> str:
        return (
            f"Registry(fee={self.fee_percent}%, auctions={len(self.auctions)}, "
            f"balances={len(self.balances)})"
        )

    def stats(self) -> dict:
        """Get registry statistics."""
        with self._lock:
            return {
                "fee_percent": self.fee_percent,
                "proceeds_recipient": bytes_to_hex(self.proceeds_recipient),
                "active_auctions": len(self.auctions),
                "settlements": len(self.receipts),
                "total_paid": sum(r.paid for r in self.receipts),
                "total_fees": sum(r.fee for r in self.receipts),
                **{f"ledger_{k}": v for k, v in self.balances.stats().items()},
            }


# =============================================================================
# Module-level operations
# =============================================================================


def create_registry(
    fee_percent: int,
    proceeds_recipient: bytes,
    config: Optional[EngineConfig] = None,
    clock: Optional[Clock] = None,
) -> Registry:
    """Create the deployment's registry."""
    return Registry(fee_percent, proceeds_recipient, config=config, clock=clock)


def list_asset(
    registry: Registry,
    asset: TransferableAsset,
    time_start: int,
    time_end: int,
    price_start: int,
    price_end: int,
    caller: bytes,
) -> None:
    """List `asset` on `registry` (see Registry.list_asset)."""
    registry.list_asset(asset, time_start, time_end, price_start, price_end, caller)


def buy(
    registry: Registry,
    asset_id: bytes,
    paid: Union[Coin, int],
    caller: bytes,
    now: Optional[int] = None,
) -> TransferableAsset:
    """Buy an asset from `registry` (see Registry.buy)."""
    return registry.buy(asset_id, paid, caller, now)


def delist(registry: Registry, asset_id: bytes, caller: bytes) -> TransferableAsset:
    """Delist an asset from `registry` (see Registry.delist)."""
    return registry.delist(asset_id, caller)


def withdraw(registry: Registry, caller: bytes) -> Coin:
    """Withdraw the caller's balance (see Registry.withdraw)."""
    return registry.withdraw(caller)
