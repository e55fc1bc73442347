"""
Input validation helpers.

Each validator raises InvalidArgument on bad input and returns the
normalized value otherwise.
"""

import re
from decimal import Decimal, InvalidOperation

from affiliate_ledger.config.business_constants import (
    MAX_COMMISSION_RATE,
    MIN_COMMISSION_RATE,
    RATE_QUANTUM,
)
from affiliate_ledger.utils.exceptions import InvalidArgument


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_actor(actor_id: str | int | None) -> str:
    """
    Validate administrative actor identifier.

    Args:
        actor_id: Admin user ID performing the action

    Returns:
        Actor ID as string

    Raises:
        InvalidArgument: If actor is missing or blank
    """
    if actor_id is None:
        raise InvalidArgument("Actor ID is required")

    actor = str(actor_id).strip()
    if not actor:
        raise InvalidArgument("Actor ID is required")

    return actor


def to_decimal(value: Decimal | int | str | float, field: str) -> Decimal:
    """
    Coerce numeric input to Decimal.

    Floats go through str() so 0.1 stays 0.1.

    Raises:
        InvalidArgument: If value is not numeric or not finite
    """
    if isinstance(value, bool):
        raise InvalidArgument(f"{field} must be a number")

    try:
        result = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidArgument(f"{field} must be a number") from None

    if not result.is_finite():
        raise InvalidArgument(f"{field} must be a finite number")

    return result


def validate_commission_rate(rate: Decimal | int | str | float) -> Decimal:
    """
    Validate commission rate is a fraction in [0, 1] with at most four
    decimal places.

    Examples:
        >>> validate_commission_rate("0.15")
        Decimal('0.15')
        >>> validate_commission_rate(2)
        Traceback (most recent call last):
        ...
        affiliate_ledger.utils.exceptions.InvalidArgument: Commission rate must be between 0 and 1
    """
    value = to_decimal(rate, "Commission rate")

    if value < MIN_COMMISSION_RATE or value > MAX_COMMISSION_RATE:
        raise InvalidArgument("Commission rate must be between 0 and 1")

    if value != value.quantize(RATE_QUANTUM):
        raise InvalidArgument(
            "Commission rate must have at most 4 decimal places"
        )

    return value


def validate_positive_amount(
    amount: Decimal | int | str | float, field: str = "Amount"
) -> Decimal:
    """Validate strictly positive monetary amount."""
    value = to_decimal(amount, field)

    if value <= 0:
        raise InvalidArgument(f"{field} must be positive")

    return value


def normalize_email(email: str) -> str:
    """
    Normalize and validate email address.

    Raises:
        InvalidArgument: If email is empty, too long or malformed
    """
    if not email or not isinstance(email, str):
        raise InvalidArgument("Email is empty")

    email = email.strip().lower()

    if len(email) > 255:
        raise InvalidArgument("Email is too long (maximum 255 characters)")

    if not EMAIL_PATTERN.match(email):
        raise InvalidArgument("Email format is invalid")

    return email


def validate_ids(ids: list[int], field: str = "IDs") -> list[int]:
    """
    Validate a non-empty list of integer identifiers.

    Raises:
        InvalidArgument: If list is empty or contains non-integers
    """
    if not ids:
        raise InvalidArgument(f"{field} list cannot be empty")

    for value in ids:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidArgument(f"{field} must be integers")

    return list(ids)
