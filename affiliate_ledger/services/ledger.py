"""
Affiliate ledger facade.

Single entry point for storefront and admin callers. Wires the component
services onto one session and delegates.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.config.business_constants import DEFAULT_COMMISSION_RATE
from affiliate_ledger.models.affiliate import Affiliate
from affiliate_ledger.models.commission import Commission
from affiliate_ledger.models.payout import Payout
from affiliate_ledger.schemas.affiliate import AffiliateRegistration
from affiliate_ledger.schemas.tracking import ClickMetadata
from affiliate_ledger.services.affiliate_service import AffiliateService
from affiliate_ledger.services.attribution_service import AttributionService
from affiliate_ledger.services.commission_service import CommissionService
from affiliate_ledger.services.fraud_detection_service import (
    FraudCheckResult,
    FraudDetectionService,
)
from affiliate_ledger.services.notification import LedgerNotifier
from affiliate_ledger.services.payout_service import PayoutService
from affiliate_ledger.services.refund_service import RefundService
from affiliate_ledger.services.tracking_service import TrackingService


class AffiliateLedger:
    """
    Service-level API of the affiliate ledger.

    Usage:
        async with session_maker() as session:
            ledger = AffiliateLedger(session, notifier=LedgerNotifier())
            token = await ledger.track_click("AB12CD34", {"ip_address": ip})

    Component services are exposed as attributes (affiliates, tracking,
    attribution, commissions, refunds, payouts, fraud) for operations not
    mirrored here.
    """

    def __init__(
        self,
        session: AsyncSession,
        notifier: LedgerNotifier | None = None,
        default_commission_rate: Decimal = DEFAULT_COMMISSION_RATE,
    ) -> None:
        self.session = session
        self.notifier = notifier

        self.affiliates = AffiliateService(
            session, notifier, default_commission_rate
        )
        self.tracking = TrackingService(session)
        self.attribution = AttributionService(session)
        self.commissions = CommissionService(session)
        self.refunds = RefundService(session)
        self.payouts = PayoutService(session, notifier)
        self.fraud = FraudDetectionService(session, notifier)

    async def register_affiliate(
        self, profile: AffiliateRegistration | dict[str, Any]
    ) -> Affiliate:
        return await self.affiliates.register_affiliate(profile)

    async def track_click(
        self,
        affiliate_code: str,
        metadata: ClickMetadata | dict[str, Any] | None = None,
    ) -> str:
        return await self.tracking.track_click(affiliate_code, metadata)

    async def attribute_conversion(
        self, session_token: str, order_id: int
    ) -> Commission | None:
        return await self.attribution.attribute_conversion(
            session_token, order_id
        )

    async def approve_commission(
        self, commission_id: int, actor_id: str
    ) -> Commission:
        return await self.commissions.approve_commission(
            commission_id, actor_id
        )

    async def mark_commission_paid(
        self,
        commission_id: int,
        payment_method: str,
        payment_reference: str,
        actor_id: str,
        notes: str | None = None,
    ) -> Commission:
        return await self.commissions.mark_commission_paid(
            commission_id, payment_method, payment_reference, actor_id, notes
        )

    async def dispute_commission(
        self, commission_id: int, actor_id: str
    ) -> Commission:
        return await self.commissions.dispute_commission(
            commission_id, actor_id
        )

    async def create_payout(
        self,
        affiliate_id: int,
        commission_ids: list[int],
        payout_method: str,
        actor_id: str,
    ) -> Payout:
        return await self.payouts.create_payout(
            affiliate_id, commission_ids, payout_method, actor_id
        )

    async def process_payout(
        self,
        payout_id: int,
        payment_reference: str,
        actor_id: str,
        notes: str | None = None,
    ) -> Payout:
        return await self.payouts.process_payout(
            payout_id, payment_reference, actor_id, notes
        )

    async def handle_refund(
        self,
        order_id: int,
        refund_amount: Decimal | int | str,
        actor_id: str,
    ) -> Commission | None:
        return await self.refunds.handle_refund(
            order_id, refund_amount, actor_id
        )

    async def evaluate_fraud(
        self,
        order_id: int | None,
        affiliate_id: int,
        customer_email: str | None,
        ip_address: str | None = None,
    ) -> FraudCheckResult:
        return await self.fraud.evaluate(
            order_id, affiliate_id, customer_email, ip_address
        )
