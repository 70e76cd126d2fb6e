"""
BalanceLedger - withdrawable payment balances.

Conceptual Background:
---------------------
Sale proceeds are not pushed to sellers. Each settlement credits the
seller's share and the platform fee into this ledger, and beneficiaries
pull their balance with a withdrawal.

Accumulation:
------------
Credits to an address that already holds a balance are joined into the
existing coin. The legacy behaviour, which rejected a second credit to an
address that had not withdrawn yet, is available behind
`reject_duplicate_credit` for compatibility.

Snapshot:
--------
`snapshot()` / `restore()` give the registry a cheap staging copy: the
entries are immutable coins, so a shallow copy of the mapping captures
the full state.
"""

from typing import Dict

from dutchx.core.errors import DuplicateCredit, NoBalance
from dutchx.core.state.coin import Coin
from dutchx.crypto import short_hex
from dutchx.utils.logger import get_logger

logger = get_logger("ledger")


class BalanceLedger:
    """
    Mapping of beneficiary address to accumulated balance.

    Attributes:
        balances: address -> Coin
        total_credited: Sum of all credits ever applied
        total_withdrawn: Sum of all withdrawals ever paid out
    """

    def __init__(self, reject_duplicate_credit: bool = False):
        """
        Args:
            reject_duplicate_credit: Legacy mode, refuse to credit an
                address that still holds a balance
        """
        self.reject_duplicate_credit = reject_duplicate_credit
        self.balances: Dict[bytes, Coin] = {}
        self.total_credited = 0
        self.total_withdrawn = 0

    # =========================================================================
    # State Access
    # =========================================================================

    def balance_of(self, address: bytes) -> int:
        """Current balance for an address (0 if none)."""
        coin = self.balances.get(address)
        return coin.value if coin else 0

    def has_balance(self, address: bytes) -> bool:
        return address in self.balances

    def __contains__(self, address: bytes) -> bool:
        return address in self.balances

    def __len__(self) -> int:
        return len(self.balances)

    @property
    def outstanding(self) -> int:
        """Total value owed to all beneficiaries."""
        return sum(coin.value for coin in self.balances.values())

    # =========================================================================
    # Mutation
    # =========================================================================

    def credit(self, address: bytes, coin: Coin) -> int:
        """
        Credit `coin` to `address`.

        The first credit creates the entry, including a zero-value one.

        Returns:
            The address's balance after the credit

        Raises:
            DuplicateCredit: legacy mode and the address already has a balance
        """
        existing = self.balances.get(address)
        if existing is None:
            balance = coin
        elif self.reject_duplicate_credit:
            raise DuplicateCredit(address)
        else:
            balance = existing.join(coin)

        self.balances[address] = balance
        self.total_credited += coin.value

        logger.debug(f"Credited {short_hex(address)}: +{coin.value}, balance={balance.value}")
        return balance.value

    def withdraw(self, address: bytes) -> Coin:
        """
        Remove and return the full balance of `address`.

        Raises:
            NoBalance: address has no entry
        """
        coin = self.balances.pop(address, None)
        if coin is None:
            raise NoBalance(address)

        self.total_withdrawn += coin.value
        logger.debug(f"Withdrawn {short_hex(address)}: amount={coin.value}")
        return coin

    # =========================================================================
    # Staging
    # =========================================================================

    def snapshot(self) -> tuple:
        """Capture the ledger state for a later restore()."""
        return dict(self.balances), self.total_credited, self.total_withdrawn

    def restore(self, snapshot: tuple) -> None:
        """Roll back to a state captured by snapshot()."""
        balances, credited, withdrawn = snapshot
        self.balances = balances
        self.total_credited = credited
        self.total_withdrawn = withdrawn

    # =========================================================================
    # Utility
    # =========================================================================

    def __repr__(self) -> str:
        return f"BalanceLedger(entries={len(self.balances)}, outstanding={self.outstanding})"

    def stats(self) -> dict:
        """Get ledger statistics."""
        return {
            "entries": len(self.balances),
            "outstanding": self.outstanding,
            "total_credited": self.total_credited,
            "total_withdrawn": self.total_withdrawn,
        }
