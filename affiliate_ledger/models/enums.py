"""
Status constants for ledger models.
"""


class AffiliateStatus:
    """Affiliate lifecycle status."""

    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    REJECTED = "rejected"

    ALL = (PENDING, ACTIVE, SUSPENDED, REJECTED)


class LinkType:
    """Tracked link variant."""

    GENERAL = "general"
    PRODUCT = "product"
    CATEGORY = "category"

    ALL = (GENERAL, PRODUCT, CATEGORY)


class CommissionStatus:
    """
    Commission status.

    pending -> approved -> paid
    pending|approved -> disputed
    pending|approved -> cancelled
    """

    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"
    CANCELLED = "cancelled"
    DISPUTED = "disputed"

    ALL = (PENDING, APPROVED, PAID, CANCELLED, DISPUTED)
    OPEN = (PENDING, APPROVED)


class PayoutStatus:
    """Payout batch status."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    ALL = (PENDING, PROCESSING, COMPLETED, FAILED)
    OPEN = (PENDING, PROCESSING)


class FraudLogStatus:
    """Fraud log status."""

    FLAGGED = "flagged"


class RiskLevel:
    """Affiliate risk classification."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
