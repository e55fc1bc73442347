"""
Attribution service.

Converts an attribution session into a pending commission when an order
completes. The session flips to converted through a single conditional
update, so concurrent or repeated attribution yields at most one commission.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.commission import Commission
from affiliate_ledger.repositories.affiliate_repository import (
    AffiliateRepository,
)
from affiliate_ledger.repositories.attribution_session_repository import (
    AttributionSessionRepository,
)
from affiliate_ledger.repositories.order_repository import OrderRepository
from affiliate_ledger.services.base_service import BaseService, transaction
from affiliate_ledger.services.commission_service import CommissionService
from affiliate_ledger.utils.datetime_utils import utc_now
from affiliate_ledger.utils.exceptions import NotFound


class AttributionService(BaseService):
    """Conversion attributor."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize attribution service."""
        super().__init__(session)
        self.session_repo = AttributionSessionRepository(session)
        self.affiliate_repo = AffiliateRepository(session)
        self.order_repo = OrderRepository(session)
        self.commission_service = CommissionService(session)

    async def attribute_conversion(
        self, session_token: str, order_id: int
    ) -> Commission | None:
        """
        Attribute completed order to the affiliate behind a session.

        Unknown, already converted or missing tokens are a silent no-op.
        After the commission is committed the order row is annotated with
        the attribution on a best-effort basis.

        Args:
            session_token: Attribution session token from checkout
            order_id: Completed order ID

        Returns:
            Created pending commission, or None if nothing was attributed

        Raises:
            NotFound: If the order does not exist (session stays open)
        """
        if not session_token:
            return None

        commission = await self._convert(session_token, order_id)
        if commission is None:
            return None

        return await self._annotate_order(commission)

    @transaction
    async def _convert(
        self, session_token: str, order_id: int
    ) -> Commission | None:
        converted = await self.session_repo.mark_converted(
            session_token, order_id, utc_now()
        )
        if not converted:
            self.logger.debug(
                "No open attribution session for token",
                extra={"order_id": order_id},
            )
            return None

        order = await self.order_repo.get_by_id(order_id)
        if not order:
            raise NotFound(f"Order {order_id} not found")

        click = await self.session_repo.get_by_token(session_token)
        affiliate = await self.affiliate_repo.get_by_id(click.affiliate_id)
        if not affiliate:
            raise NotFound(f"Affiliate {click.affiliate_id} not found")

        commission = await self.commission_service.create_commission(
            affiliate_id=affiliate.id,
            order_id=order.id,
            order_total=order.total_amount,
            commission_rate=affiliate.commission_rate,
            click_id=click.id,
        )

        self.logger.info(
            "Conversion attributed",
            extra={
                "affiliate_id": affiliate.id,
                "order_id": order.id,
                "click_id": click.id,
                "commission_id": commission.id,
            },
        )
        return commission

    async def _annotate_order(self, commission: Commission) -> Commission:
        """Write attribution onto the order and bump affiliate totals."""
        commission_id = commission.id
        order_id = commission.order_id
        try:
            await self.order_repo.annotate_attribution(
                commission.order_id,
                commission.affiliate_id,
                commission.click_id,
                commission.commission_amount,
            )
            await self.affiliate_repo.add_to_aggregates(
                commission.affiliate_id,
                total_sales=commission.order_total,
                total_commissions=commission.commission_amount,
                pending_commissions=commission.commission_amount,
            )
            await self.commit()
            return commission
        except Exception as e:
            await self.rollback()
            self.logger.warning(
                "Failed to annotate order with attribution",
                extra={
                    "order_id": order_id,
                    "commission_id": commission_id,
                    "error": str(e),
                },
            )

        # Rollback expired every loaded row
        return await self.commission_service.get_commission(commission_id)
