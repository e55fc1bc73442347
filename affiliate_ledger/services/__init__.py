"""
Services.

Business logic layer of the affiliate ledger.
"""

from affiliate_ledger.services.affiliate_service import AffiliateService
from affiliate_ledger.services.attribution_service import AttributionService
from affiliate_ledger.services.commission_service import (
    CommissionService,
    calculate_commission,
)
from affiliate_ledger.services.fraud_detection_service import (
    FraudCheckResult,
    FraudDetectionService,
    RiskProfile,
)
from affiliate_ledger.services.ledger import AffiliateLedger
from affiliate_ledger.services.notification import LedgerNotifier
from affiliate_ledger.services.payout_service import PayoutService
from affiliate_ledger.services.refund_service import RefundService
from affiliate_ledger.services.tracking_service import TrackingService


__all__ = [
    "AffiliateLedger",
    "AffiliateService",
    "AttributionService",
    "CommissionService",
    "FraudCheckResult",
    "FraudDetectionService",
    "LedgerNotifier",
    "PayoutService",
    "RefundService",
    "RiskProfile",
    "TrackingService",
    "calculate_commission",
]
