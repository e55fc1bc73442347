"""
Fraud detection service.

Scores attributed orders against heuristic fraud signals, records flags,
and intervenes by disputing commissions or suspending the affiliate.
Detection is advisory: evaluation and flagging never raise.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.config.business_constants import (
    ABNORMAL_CONVERSION_RATE,
    AUTO_SUSPEND_SCORE_THRESHOLD,
    CLICK_FLOODING_MAX_CLICKS,
    CLICK_FLOODING_WINDOW_HOURS,
    CONVERSION_WINDOW_DAYS,
    FRAUD_DETECTION_ACTOR,
    FRAUD_SCORE_ABNORMAL_CONVERSION,
    FRAUD_SCORE_CLICK_FLOODING,
    FRAUD_SCORE_MAX,
    FRAUD_SCORE_NEW_AFFILIATE_HIGH_VALUE,
    FRAUD_SCORE_ORDER_BURST,
    FRAUD_SCORE_SELF_REFERRAL,
    HIGH_RISK_AVERAGE_SCORE,
    HIGH_RISK_RECENT_FLAGS,
    HIGH_VALUE_ORDER_TOTAL,
    MEDIUM_RISK_AVERAGE_SCORE,
    MEDIUM_RISK_RECENT_FLAGS,
    NEW_AFFILIATE_AGE_DAYS,
    ORDER_BURST_MAX_ORDERS,
    ORDER_BURST_WINDOW_HOURS,
    REASON_ABNORMAL_CONVERSION,
    REASON_CHECK_FAILED,
    REASON_CLICK_FLOODING,
    REASON_NEW_AFFILIATE_HIGH_VALUE,
    REASON_ORDER_BURST,
    REASON_SELF_REFERRAL,
    RISK_PROFILE_WINDOW_DAYS,
    SUSPICIOUS_SCORE_THRESHOLD,
)
from affiliate_ledger.models.enums import (
    AffiliateStatus,
    FraudLogStatus,
    RiskLevel,
)
from affiliate_ledger.repositories.affiliate_repository import (
    AffiliateRepository,
)
from affiliate_ledger.repositories.attribution_session_repository import (
    AttributionSessionRepository,
)
from affiliate_ledger.repositories.commission_repository import (
    CommissionRepository,
)
from affiliate_ledger.repositories.fraud_log_repository import (
    FraudLogRepository,
)
from affiliate_ledger.repositories.order_repository import OrderRepository
from affiliate_ledger.services.base_service import BaseService, transaction
from affiliate_ledger.services.notification import LedgerNotifier
from affiliate_ledger.services.notification.templates import (
    fraud_alert_message,
)
from affiliate_ledger.utils.datetime_utils import ensure_utc, utc_now


@dataclass
class FraudCheckResult:
    """Outcome of a fraud evaluation."""

    is_suspicious: bool
    reasons: list[str] = field(default_factory=list)
    risk_score: int = 0


@dataclass
class RiskProfile:
    """Fraud history summary of an affiliate."""

    risk_level: str
    total_flags: int
    recent_flags: int
    average_risk_score: float


def classify_risk(average_score: float, recent_flags: int) -> str:
    """
    Classify affiliate risk from flag history.

    Examples:
        >>> classify_risk(75.0, 0)
        'high'
        >>> classify_risk(10.0, 2)
        'medium'
        >>> classify_risk(10.0, 1)
        'low'
    """
    if (
        average_score >= HIGH_RISK_AVERAGE_SCORE
        or recent_flags >= HIGH_RISK_RECENT_FLAGS
    ):
        return RiskLevel.HIGH
    if (
        average_score >= MEDIUM_RISK_AVERAGE_SCORE
        or recent_flags >= MEDIUM_RISK_RECENT_FLAGS
    ):
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


class FraudDetectionService(BaseService):
    """Fraud detector for attributed orders."""

    def __init__(
        self,
        session: AsyncSession,
        notifier: LedgerNotifier | None = None,
    ) -> None:
        """Initialize fraud detection service."""
        super().__init__(session)
        self.affiliate_repo = AffiliateRepository(session)
        self.session_repo = AttributionSessionRepository(session)
        self.order_repo = OrderRepository(session)
        self.commission_repo = CommissionRepository(session)
        self.fraud_log_repo = FraudLogRepository(session)
        self.notifier = notifier

    async def evaluate(
        self,
        order_id: int | None,
        affiliate_id: int,
        customer_email: str | None,
        ip_address: str | None = None,
    ) -> FraudCheckResult:
        """
        Score an attributed order.

        Signals (points):
            self_referral (50): customer email equals affiliate email
            click_flooding (30): > 10 clicks from the address in 24h
            abnormal_conversion_rate (25): > 50% conversion over 30 days
            order_burst (20): > 5 attributed orders in the last hour
            new_affiliate_high_value (15): affiliate < 7 days old and
                order total > 5000

        Args:
            order_id: Order being screened
            affiliate_id: Credited affiliate
            customer_email: Customer email on the order
            ip_address: Customer network address, if known

        Returns:
            Result with score clamped to 100. Unknown affiliates score 0;
            internal errors yield a non-suspicious result with reason
            check_failed.
        """
        try:
            return await self._score(
                order_id, affiliate_id, customer_email, ip_address
            )
        except Exception as e:
            self.logger.error(
                "Fraud check failed",
                extra={
                    "order_id": order_id,
                    "affiliate_id": affiliate_id,
                    "error": str(e),
                },
            )
            await self._discard_failed_check()
            return FraudCheckResult(
                is_suspicious=False, reasons=[REASON_CHECK_FAILED], risk_score=0
            )

    async def _discard_failed_check(self) -> None:
        """Roll back so a failed statement does not abort later work."""
        try:
            await self.rollback()
        except Exception as e:
            self.logger.warning(
                "Rollback after failed fraud check failed",
                extra={"error": str(e)},
            )

    async def _score(
        self,
        order_id: int | None,
        affiliate_id: int,
        customer_email: str | None,
        ip_address: str | None,
    ) -> FraudCheckResult:
        affiliate = await self.affiliate_repo.get_by_id(affiliate_id)
        if not affiliate:
            return FraudCheckResult(is_suspicious=False)

        now = utc_now()
        reasons: list[str] = []
        score = 0

        # Self-referral
        if (
            customer_email
            and affiliate.email
            and customer_email.strip().lower() == affiliate.email.lower()
        ):
            reasons.append(REASON_SELF_REFERRAL)
            score += FRAUD_SCORE_SELF_REFERRAL

        # Click flooding from one address
        if ip_address:
            clicks = await self.session_repo.count_from_address(
                affiliate_id,
                ip_address,
                now - timedelta(hours=CLICK_FLOODING_WINDOW_HOURS),
            )
            if clicks > CLICK_FLOODING_MAX_CLICKS:
                reasons.append(REASON_CLICK_FLOODING)
                score += FRAUD_SCORE_CLICK_FLOODING

        # Conversion rate
        total_clicks, converted = await self.session_repo.get_conversion_counts(
            affiliate_id, now - timedelta(days=CONVERSION_WINDOW_DAYS)
        )
        if total_clicks:
            rate = Decimal(converted) / Decimal(total_clicks)
            if rate > ABNORMAL_CONVERSION_RATE:
                reasons.append(REASON_ABNORMAL_CONVERSION)
                score += FRAUD_SCORE_ABNORMAL_CONVERSION

        # Order burst
        recent_orders = await self.order_repo.count_recent_for_affiliate(
            affiliate_id, now - timedelta(hours=ORDER_BURST_WINDOW_HOURS)
        )
        if recent_orders > ORDER_BURST_MAX_ORDERS:
            reasons.append(REASON_ORDER_BURST)
            score += FRAUD_SCORE_ORDER_BURST

        # New affiliate with high-value order
        affiliate_age = now - ensure_utc(affiliate.created_at)
        if affiliate_age < timedelta(days=NEW_AFFILIATE_AGE_DAYS) and order_id:
            order = await self.order_repo.get_by_id(order_id)
            if order and order.total_amount > HIGH_VALUE_ORDER_TOTAL:
                reasons.append(REASON_NEW_AFFILIATE_HIGH_VALUE)
                score += FRAUD_SCORE_NEW_AFFILIATE_HIGH_VALUE

        score = min(score, FRAUD_SCORE_MAX)
        return FraudCheckResult(
            is_suspicious=score >= SUSPICIOUS_SCORE_THRESHOLD,
            reasons=reasons,
            risk_score=score,
        )

    async def flag(
        self,
        affiliate_id: int,
        order_id: int | None,
        result: FraudCheckResult,
    ) -> bool:
        """
        Record evaluation and act on it.

        Always appends a fraud log. A score of 80 or more suspends the
        affiliate; a suspicious result disputes the order's open
        commissions. Failures are logged and rolled back.

        Returns:
            True if the flag was recorded, False otherwise
        """
        try:
            suspended = await self._record_flag(affiliate_id, order_id, result)
        except Exception as e:
            self.logger.warning(
                "Fraud flag not recorded",
                extra={
                    "affiliate_id": affiliate_id,
                    "order_id": order_id,
                    "error": str(e),
                },
            )
            return False

        if result.is_suspicious and self.notifier:
            self.notifier.notify(
                fraud_alert_message(
                    affiliate_id,
                    order_id,
                    result.risk_score,
                    result.reasons,
                    suspended,
                )
            )
        return True

    @transaction
    async def _record_flag(
        self,
        affiliate_id: int,
        order_id: int | None,
        result: FraudCheckResult,
    ) -> bool:
        await self.fraud_log_repo.create(
            affiliate_id=affiliate_id,
            order_id=order_id,
            risk_score=result.risk_score,
            reasons=list(result.reasons),
            status=FraudLogStatus.FLAGGED,
        )

        suspended = False
        if result.risk_score >= AUTO_SUSPEND_SCORE_THRESHOLD:
            await self.affiliate_repo.set_status(
                affiliate_id,
                AffiliateStatus.SUSPENDED,
                updated_by=FRAUD_DETECTION_ACTOR,
            )
            suspended = True
            self.logger.warning(
                "Affiliate automatically suspended due to high fraud risk",
                extra={
                    "affiliate_id": affiliate_id,
                    "risk_score": result.risk_score,
                },
            )

        if result.is_suspicious and order_id is not None:
            disputed = await self.commission_repo.dispute_for_order(
                order_id, FRAUD_DETECTION_ACTOR
            )
            self.logger.warning(
                "Order commissions disputed by fraud detection",
                extra={"order_id": order_id, "count": disputed},
            )

        return suspended

    async def screen_order(
        self,
        order_id: int,
        affiliate_id: int,
        customer_email: str | None,
        ip_address: str | None = None,
    ) -> FraudCheckResult:
        """Evaluate order and flag it when suspicious."""
        result = await self.evaluate(
            order_id, affiliate_id, customer_email, ip_address
        )
        if result.is_suspicious:
            await self.flag(affiliate_id, order_id, result)
        return result

    async def get_risk_profile(self, affiliate_id: int) -> RiskProfile:
        """
        Summarize fraud history of affiliate.

        High risk: average score >= 70 or >= 5 flags in 30 days.
        Medium risk: average score >= 40 or >= 2 flags in 30 days.
        """
        since = utc_now() - timedelta(days=RISK_PROFILE_WINDOW_DAYS)
        total, recent, average = await self.fraud_log_repo.get_summary(
            affiliate_id, since
        )

        if not total:
            return RiskProfile(
                risk_level=RiskLevel.LOW,
                total_flags=0,
                recent_flags=0,
                average_risk_score=0.0,
            )

        return RiskProfile(
            risk_level=classify_risk(average, recent),
            total_flags=total,
            recent_flags=recent,
            average_risk_score=round(average, 2),
        )
