"""
Ledger exception taxonomy.

Validation and lookup failures are raised to the caller unchanged.
Best-effort side effects (notifications, order annotation) never raise these.
"""

from pydantic import ValidationError


class LedgerError(Exception):
    """Base class for all ledger errors."""

    pass


class NotFound(LedgerError):
    """Affiliate, commission, payout, order or session does not exist."""

    pass


class InvalidArgument(LedgerError):
    """Bad rate, payout batch mismatch, malformed input or missing actor."""

    pass


class InvalidReferral(LedgerError):
    """Unknown or inactive affiliate code."""

    pass


class ConflictAlready(LedgerError):
    """Conditional status update found the row in an unexpected state."""

    pass


def invalid_argument_from(exc: ValidationError) -> InvalidArgument:
    """
    Convert pydantic validation error into InvalidArgument.

    Args:
        exc: Validation error raised while building an input model

    Returns:
        InvalidArgument carrying a compact field summary
    """
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    return InvalidArgument(f"Invalid input: {details}")
