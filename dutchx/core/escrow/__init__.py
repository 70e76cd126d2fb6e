"""Escrow custody for auctioned assets"""
from dutchx.core.escrow.asset import TransferableAsset, Collectible
from dutchx.core.escrow.slot import EscrowSlot

__all__ = [
    "TransferableAsset",
    "Collectible",
    "EscrowSlot",
]
