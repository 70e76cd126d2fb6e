"""
Error kinds raised by the auction engine.

Every error rejects the whole requested operation: the registry state is
left exactly as it was before the call. Callers resubmit a corrected
request (more payment, another asset id, a later time).
"""

from typing import Optional

from dutchx.crypto import bytes_to_hex


class AuctionError(ValueError):
    """Base class for all rejected engine operations."""


class DuplicateListing(AuctionError):
    """An auction for this asset id already exists."""

    def __init__(self, asset_id: bytes):
        self.asset_id = asset_id
        super().__init__(f"Asset {bytes_to_hex(asset_id)} is already listed")


class NoSuchAuction(AuctionError):
    """No live auction exists for this asset id."""

    def __init__(self, asset_id: bytes):
        self.asset_id = asset_id
        super().__init__(f"No auction for asset {bytes_to_hex(asset_id)}")


class AuctionWindowViolation(AuctionError):
    """The current time lies outside the auction window."""

    def __init__(self, now: int, time_start: int, time_end: int):
        self.now = now
        self.time_start = time_start
        self.time_end = time_end
        super().__init__(f"Time {now} outside auction window [{time_start}, {time_end}]")


class InvalidWindow(AuctionError):
    """The auction window is empty or inverted."""

    def __init__(self, time_start: int, time_end: int):
        self.time_start = time_start
        self.time_end = time_end
        super().__init__(f"Invalid auction window [{time_start}, {time_end}]")


class InvalidPrice(AuctionError):
    """A price endpoint is negative."""

    def __init__(self, price_start: int, price_end: int):
        self.price_start = price_start
        self.price_end = price_end
        super().__init__(f"Prices must be non-negative, got {price_start} -> {price_end}")


class InsufficientPayment(AuctionError):
    """Payment is below the current ask price."""

    def __init__(self, paid: int, expected: int):
        self.paid = paid
        self.expected = expected
        super().__init__(f"Paid {paid}, current price is {expected}")


class NotOwner(AuctionError):
    """Caller is not the seller of the auction."""

    def __init__(self, asset_id: bytes, caller: bytes):
        self.asset_id = asset_id
        self.caller = caller
        super().__init__(
            f"{bytes_to_hex(caller)} is not the seller of asset {bytes_to_hex(asset_id)}"
        )


class NoBalance(AuctionError):
    """Caller has no withdrawable balance."""

    def __init__(self, address: bytes):
        self.address = address
        super().__init__(f"No balance for {bytes_to_hex(address)}")


class DuplicateCredit(AuctionError):
    """Legacy ledger mode: address already holds an unwithdrawn balance."""

    def __init__(self, address: bytes):
        self.address = address
        super().__init__(f"Balance for {bytes_to_hex(address)} has not been withdrawn")


class EscrowError(AuctionError):
    """Escrow slot misuse (double deposit, release of an empty slot)."""

    def __init__(self, message: str, asset_id: Optional[bytes] = None):
        self.asset_id = asset_id
        super().__init__(message)
