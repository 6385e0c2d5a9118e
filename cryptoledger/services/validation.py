"""Coercion of caller-supplied numbers into exact decimals."""

from decimal import Decimal, InvalidOperation

from cryptoledger.config import MAX_DECIMAL_PLACES
from cryptoledger.errors import InvalidArgument


def to_positive_decimal(value: object, field: str) -> Decimal:
    """Convert ``value`` to a positive, finite Decimal.

    Floats are converted through their shortest repr so 0.1 becomes
    Decimal("0.1") rather than its binary expansion.

    Raises:
        InvalidArgument: missing, non-numeric, non-finite, non-positive, or
            more than MAX_DECIMAL_PLACES fractional digits
    """
    if value is None or isinstance(value, bool):
        raise InvalidArgument(f"{field} is required")

    try:
        if isinstance(value, float):
            amount = Decimal(repr(value))
        else:
            amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidArgument(f"{field} must be a number, got {value!r}")

    if not amount.is_finite():
        raise InvalidArgument(f"{field} must be finite")
    if amount <= 0:
        raise InvalidArgument(f"{field} must be positive, got {amount}")
    if -amount.as_tuple().exponent > MAX_DECIMAL_PLACES:
        raise InvalidArgument(
            f"{field} supports at most {MAX_DECIMAL_PLACES} decimal places"
        )
    return amount


def require_id(value: object, field: str) -> int:
    """Validate a positive integer identifier."""
    if value is None or isinstance(value, bool):
        raise InvalidArgument(f"{field} is required")
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value)
    if not isinstance(value, int) or value <= 0:
        raise InvalidArgument(f"{field} must be a positive integer, got {value!r}")
    return value
