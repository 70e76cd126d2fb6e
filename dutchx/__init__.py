"""
Dutch-auction Escrow Exchange (dutchx)

A settlement engine for fixed-schedule Dutch auctions:
- Linearly decaying ask price over a time window
- Single-asset escrow custody per listing
- Atomic buy / delist / withdraw against one shared registry
- Seller proceeds and platform fee ledger
"""

__version__ = "0.1.0"
