"""Dutch auction listings"""
from dutchx.core.auction.auction import Auction
from dutchx.core.auction.book import AuctionBook

__all__ = [
    "Auction",
    "AuctionBook",
]
