"""
Transferable assets - the move-only payload held in escrow.

The engine never looks inside an asset: it only needs a stable
`asset_id` to key the auction book and a notification hook when custody
changes hands. Assets refuse to be copied so that a listed asset cannot
be duplicated while it sits in escrow.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from dutchx.crypto import bytes_to_hex


class TransferableAsset:
    """
    Base class for anything that can be auctioned.

    Subclasses must expose `asset_id` (bytes). `on_transfer` is called by
    the escrow each time custody moves to a new holder.
    """

    asset_id: bytes

    def on_transfer(self, holder: bytes) -> None:
        """Custody moved to `holder`."""

    def __copy__(self):
        raise TypeError(f"{type(self).__name__} is move-only and cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError(f"{type(self).__name__} is move-only and cannot be copied")


@dataclass(eq=False)
class Collectible(TransferableAsset):
    """
    A unique item (NFT-like).

    Attributes:
        asset_id: Unique identifier (allocated by the host)
        metadata: Free-form description
        holder: Address currently holding custody (None while unassigned)
    """
    asset_id: bytes
    metadata: Dict[str, Any] = field(default_factory=dict)
    holder: Optional[bytes] = None

    def __post_init__(self):
        if not isinstance(self.asset_id, (bytes, bytearray)) or not self.asset_id:
            raise ValueError("asset_id must be non-empty bytes")
        self.asset_id = bytes(self.asset_id)

    def on_transfer(self, holder: bytes) -> None:
        self.holder = holder

    def __repr__(self) -> str:
        return f"Collectible(id={bytes_to_hex(self.asset_id)[:10]}..., metadata={self.metadata})"
