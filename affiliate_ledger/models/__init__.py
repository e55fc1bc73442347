"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from affiliate_ledger.models.affiliate import Affiliate
from affiliate_ledger.models.affiliate_link import AffiliateLink
from affiliate_ledger.models.attribution_session import AttributionSession
from affiliate_ledger.models.base import Base
from affiliate_ledger.models.commission import Commission
from affiliate_ledger.models.enums import (
    AffiliateStatus,
    CommissionStatus,
    FraudLogStatus,
    LinkType,
    PayoutStatus,
    RiskLevel,
)
from affiliate_ledger.models.fraud_log import FraudLog
from affiliate_ledger.models.order import Order
from affiliate_ledger.models.payout import Payout, PayoutCommission


__all__ = [
    "Base",
    # Entities
    "Affiliate",
    "AffiliateLink",
    "AttributionSession",
    "Commission",
    "FraudLog",
    "Order",
    "Payout",
    "PayoutCommission",
    # Status constants
    "AffiliateStatus",
    "CommissionStatus",
    "FraudLogStatus",
    "LinkType",
    "PayoutStatus",
    "RiskLevel",
]
