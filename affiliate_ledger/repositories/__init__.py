"""
Repositories.

Data access layer for ledger models.
"""

from affiliate_ledger.repositories.affiliate_repository import (
    AffiliateLinkRepository,
    AffiliateRepository,
)
from affiliate_ledger.repositories.attribution_session_repository import (
    AttributionSessionRepository,
)
from affiliate_ledger.repositories.base import BaseRepository
from affiliate_ledger.repositories.commission_repository import (
    CommissionRepository,
)
from affiliate_ledger.repositories.fraud_log_repository import (
    FraudLogRepository,
)
from affiliate_ledger.repositories.order_repository import OrderRepository
from affiliate_ledger.repositories.payout_repository import PayoutRepository


__all__ = [
    "AffiliateLinkRepository",
    "AffiliateRepository",
    "AttributionSessionRepository",
    "BaseRepository",
    "CommissionRepository",
    "FraudLogRepository",
    "OrderRepository",
    "PayoutRepository",
]
