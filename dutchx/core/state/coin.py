"""
Coin - payment value with exact split and join.

Coins are immutable: splitting returns two new coins whose values sum to
the original, joining returns one coin holding both values. No operation
creates or destroys value.
"""

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class Coin:
    """
    A quantity of the settlement currency.

    Attributes:
        value: Non-negative integer amount
    """
    value: int

    def __post_init__(self):
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise TypeError(f"Coin value must be int, got {type(self.value).__name__}")
        if self.value < 0:
            raise ValueError(f"Coin value must be non-negative, got {self.value}")

    @classmethod
    def zero(cls) -> "Coin":
        return cls(0)

    def split(self, amount: int) -> Tuple["Coin", "Coin"]:
        """
        Split off `amount` from this coin.

        Returns:
            (remainder, part) with remainder.value + part.value == self.value

        Raises:
            ValueError: amount negative or larger than the coin
        """
        if amount < 0 or amount > self.value:
            raise ValueError(f"Cannot split {amount} from coin of value {self.value}")
        return Coin(self.value - amount), Coin(amount)

    def join(self, other: "Coin") -> "Coin":
        """Merge two coins into one."""
        return Coin(self.value + other.value)

    def __int__(self) -> int:
        return self.value


def as_coin(payment: Union[Coin, int]) -> Coin:
    """Accept either a Coin or a plain integer amount."""
    if isinstance(payment, Coin):
        return payment
    return Coin(payment)
