"""Payment values and balance ledger"""
from dutchx.core.state.coin import Coin, as_coin
from dutchx.core.state.ledger import BalanceLedger

__all__ = [
    "Coin",
    "as_coin",
    "BalanceLedger",
]
