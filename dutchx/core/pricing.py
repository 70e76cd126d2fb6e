"""
Pricing - Dutch auction price schedule.

The ask price moves linearly from price_start at time_start to
price_end at time_end:

    price = price_end + (time_end - now) * (price_start - price_end) / (time_end - time_start)

Integer arithmetic only. The product is formed before the single
division, which truncates toward zero, so the result is within one unit
of the exact rational price and hits both endpoints exactly.
"""

from dutchx.core.errors import AuctionWindowViolation, InvalidWindow


def _div_trunc(numerator: int, denominator: int) -> int:
    """Integer division truncating toward zero."""
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


def check_window(time_start: int, time_end: int) -> None:
    """Raise InvalidWindow unless time_start < time_end."""
    if time_start >= time_end:
        raise InvalidWindow(time_start, time_end)


def in_window(now: int, time_start: int, time_end: int) -> bool:
    """Check whether now lies in the closed window [time_start, time_end]."""
    return time_start <= now <= time_end


def current_price(
    now: int,
    time_start: int,
    time_end: int,
    price_start: int,
    price_end: int,
) -> int:
    """
    Compute the current ask price.

    Args:
        now: Current timestamp
        time_start: Window start (price == price_start)
        time_end: Window end (price == price_end)
        price_start: Opening price
        price_end: Closing price

    Returns:
        Ask price at `now`

    Raises:
        InvalidWindow: time_start >= time_end (zero-length or inverted)
        AuctionWindowViolation: now outside [time_start, time_end]
    """
    check_window(time_start, time_end)
    if not in_window(now, time_start, time_end):
        raise AuctionWindowViolation(now, time_start, time_end)

    remaining = time_end - now
    duration = time_end - time_start
    return price_end + _div_trunc(remaining * (price_start - price_end), duration)
