"""
AuctionBook - keyed collection of live auctions.

At most one auction per asset id. Inserting under an existing key is
rejected rather than replacing, since a replaced auction would orphan the
asset in its escrow slot.
"""

from typing import Dict, Iterator, Optional

from dutchx.core.auction.auction import Auction
from dutchx.core.errors import DuplicateListing, NoSuchAuction


class AuctionBook:
    """Mapping of asset id to live Auction."""

    def __init__(self):
        self.auctions: Dict[bytes, Auction] = {}

    def get(self, asset_id: bytes) -> Optional[Auction]:
        return self.auctions.get(asset_id)

    def insert(self, auction: Auction) -> None:
        """
        Add an auction under its asset id.

        Raises:
            DuplicateListing: asset id already present
        """
        if auction.asset_id in self.auctions:
            raise DuplicateListing(auction.asset_id)
        self.auctions[auction.asset_id] = auction

    def remove(self, asset_id: bytes) -> Auction:
        """
        Remove and return the auction for `asset_id`.

        Raises:
            NoSuchAuction: asset id not present
        """
        auction = self.auctions.pop(asset_id, None)
        if auction is None:
            raise NoSuchAuction(asset_id)
        return auction

    def snapshot(self) -> Dict[bytes, Auction]:
        """Shallow copy of the book for a later restore()."""
        return dict(self.auctions)

    def restore(self, snapshot: Dict[bytes, Auction]) -> None:
        self.auctions = snapshot

    def __contains__(self, asset_id: bytes) -> bool:
        return asset_id in self.auctions

    def __len__(self) -> int:
        return len(self.auctions)

    def __iter__(self) -> Iterator[Auction]:
        return iter(list(self.auctions.values()))
