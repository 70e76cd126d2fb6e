"""
Auction - a single Dutch auction listing.

An auction pairs the listing terms (seller, time window, price
endpoints) with the escrow slot holding the asset for sale. The two live
and die together: the auction is discarded as soon as its slot releases.
"""

from dataclasses import dataclass, field

from dutchx.core.escrow import EscrowSlot
from dutchx.core.pricing import current_price, in_window
from dutchx.crypto import bytes_to_hex


@dataclass(eq=False)
class Auction:
    """
    Listing record.

    Attributes:
        seller: Address that listed the asset and receives the proceeds
        time_start: Window start
        time_end: Window end
        price_start: Ask price at time_start
        price_end: Ask price at time_end
        escrow: Slot holding the asset
    """
    seller: bytes
    time_start: int
    time_end: int
    price_start: int
    price_end: int
    escrow: EscrowSlot = field(repr=False)

    @property
    def asset_id(self) -> bytes:
        return self.escrow.asset_id

    def is_seller(self, address: bytes) -> bool:
        return address == self.seller

    def is_open(self, now: int) -> bool:
        """Check whether `now` is inside the sale window."""
        return in_window(now, self.time_start, self.time_end)

    def price_at(self, now: int) -> int:
        """Current ask price (see dutchx.core.pricing.current_price)."""
        return current_price(now, self.time_start, self.time_end, self.price_start, self.price_end)

    def to_dict(self) -> dict:
        return {
            "asset_id": bytes_to_hex(self.asset_id),
            "seller": bytes_to_hex(self.seller),
            "time_start": self.time_start,
            "time_end": self.time_end,
            "price_start": self.price_start,
            "price_end": self.price_end,
        }
