"""
dutchx Registry Module.

Shared settlement state and the list / buy / delist / withdraw operations.
"""

from dutchx.core.registry.registry import (
    Registry,
    SettlementReceipt,
    ESCROW_ADDRESS,
    compute_fee,
    create_registry,
    list_asset,
    buy,
    delist,
    withdraw,
)

__all__ = [
    "Registry",
    "SettlementReceipt",
    "ESCROW_ADDRESS",
    "compute_fee",
    "create_registry",
    "list_asset",
    "buy",
    "delist",
    "withdraw",
]
