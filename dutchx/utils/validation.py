"""
Input Validation - sanity checks on values entering the registry.

Rejects malformed inputs before any state is touched:
- Addresses of the wrong size or type
- Negative or non-integer amounts and timestamps
- Fee percentages outside [0, 100]
"""

from typing import Any, Optional, Tuple

from dutchx.crypto import ADDRESS_SIZE

# =============================================================================
# Constants
# =============================================================================

MIN_AMOUNT = 0
MAX_AMOUNT = 2**64 - 1
MIN_TIMESTAMP = 0
MAX_TIMESTAMP = 2**63 - 1
MAX_FEE_PERCENT = 100


# =============================================================================
# Validation Functions
# =============================================================================


def validate_bytes(
    data: Any,
    name: str,
    expected_length: Optional[int] = None,
) -> Tuple[bool, str]:
    """
    Validate bytes input.

    Args:
        data: Data to validate
        name: Field name for error messages
        expected_length: Exact expected length

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(data, (bytes, bytearray)):
        return False, f"{name} must be bytes, got {type(data).__name__}"

    if expected_length is not None and len(data) != expected_length:
        return False, f"{name} must be {expected_length} bytes, got {len(data)}"

    return True, ""


def validate_address(address: Any, name: str = "address") -> Tuple[bool, str]:
    """Validate a participant address."""
    return validate_bytes(address, name, expected_length=ADDRESS_SIZE)


def validate_integer(
    value: Any,
    name: str,
    min_val: int,
    max_val: int,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(value, int) or isinstance(value, bool):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_amount(amount: Any, name: str = "amount") -> Tuple[bool, str]:
    """Validate a currency amount."""
    return validate_integer(amount, name, MIN_AMOUNT, MAX_AMOUNT)


def validate_timestamp(timestamp: Any, name: str = "timestamp") -> Tuple[bool, str]:
    """Validate a timestamp."""
    return validate_integer(timestamp, name, MIN_TIMESTAMP, MAX_TIMESTAMP)


def validate_fee_percent(fee_percent: Any) -> Tuple[bool, str]:
    """Validate a platform fee percentage."""
    return validate_integer(fee_percent, "fee_percent", 0, MAX_FEE_PERCENT)


def require(*results: Tuple[bool, str]) -> None:
    """
    Raise ValueError for the first failed validation result.

    Usage:
        require(validate_address(seller, "seller"), validate_amount(price))
    """
    for is_valid, error in results:
        if not is_valid:
            raise ValueError(error)
