"""
Escrow slot - single-asset custody cell.

A slot is created holding exactly one asset and is emptied exactly once,
either when the asset is sold or when the seller delists it. An emptied
slot is spent: it accepts no further deposits and cannot release again.
"""

from typing import Optional

from dutchx.core.errors import EscrowError
from dutchx.core.escrow.asset import TransferableAsset
from dutchx.crypto import short_hex
from dutchx.utils.logger import get_logger

logger = get_logger("escrow")


class EscrowSlot:
    """
    Holds one asset on behalf of its eventual recipient.

    Attributes:
        asset_id: Id of the escrowed asset (kept after release)
        released_to: Address the asset was released to, once spent
    """

    __slots__ = ("_asset", "asset_id", "released_to")

    def __init__(self, asset: TransferableAsset, custodian: Optional[bytes] = None):
        """
        Args:
            asset: Asset to take into custody
            custodian: Address recorded as the holder while escrowed
        """
        if asset is None:
            raise EscrowError("Cannot escrow nothing")
        self._asset: Optional[TransferableAsset] = asset
        self.asset_id: bytes = asset.asset_id
        self.released_to: Optional[bytes] = None
        if custodian is not None:
            asset.on_transfer(custodian)

    @property
    def is_empty(self) -> bool:
        return self._asset is None

    def peek(self) -> TransferableAsset:
        """Look at the escrowed asset without releasing it."""
        if self._asset is None:
            raise EscrowError("Escrow slot is empty", self.asset_id)
        return self._asset

    def release(self, recipient: bytes) -> TransferableAsset:
        """
        Empty the slot and hand the asset to `recipient`.

        The slot stays full if the asset's transfer hook raises.

        Raises:
            EscrowError: slot already released
        """
        if self._asset is None:
            raise EscrowError("Escrow slot already released", self.asset_id)

        asset = self._asset
        asset.on_transfer(recipient)
        self._asset = None
        self.released_to = recipient

        logger.debug(f"Escrow released: asset={short_hex(self.asset_id)} to={short_hex(recipient)}")
        return asset

    def __copy__(self):
        raise TypeError("EscrowSlot cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("EscrowSlot cannot be copied")

    def __repr__(self) -> str:
        state = "empty" if self.is_empty else "full"
        return f"EscrowSlot(asset={short_hex(self.asset_id)}, {state})"
