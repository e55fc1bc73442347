"""
Refund service.

Adjusts the commission ledger when an attributed order is refunded.
Unpaid commissions are reduced in place; paid commissions are never
rewritten, a compensating entry with negative amounts is appended instead.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.commission import Commission
from affiliate_ledger.models.enums import CommissionStatus
from affiliate_ledger.repositories.commission_repository import (
    CommissionRepository,
)
from affiliate_ledger.services.base_service import BaseService, transaction
from affiliate_ledger.services.commission_service import (
    CommissionService,
    calculate_commission,
)
from affiliate_ledger.utils.exceptions import ConflictAlready, InvalidArgument
from affiliate_ledger.utils.validation import (
    require_actor,
    validate_positive_amount,
)


class RefundService(BaseService):
    """Refund adjuster."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize refund service."""
        super().__init__(session)
        self.commission_repo = CommissionRepository(session)
        self.commission_service = CommissionService(session)

    @transaction
    async def handle_refund(
        self,
        order_id: int,
        refund_amount: Decimal | int | str,
        actor_id: str,
    ) -> Commission | None:
        """
        Apply order refund to its commission.

        Repeated refunds for the same order are applied again; callers own
        deduplication.

        Args:
            order_id: Refunded order ID
            refund_amount: Refunded portion of the order total (> 0)
            actor_id: Admin or system actor

        Returns:
            Compensating commission (paid original), the adjusted commission
            (pending/approved original), or None when nothing changed

        Raises:
            InvalidArgument: If amount is not positive, exceeds the
                commission's order total, or actor is missing
            ConflictAlready: If the commission changed concurrently
        """
        actor = require_actor(actor_id)
        refund = validate_positive_amount(refund_amount, "Refund amount")

        original = await self.commission_repo.get_original_for_order(order_id)
        if not original:
            self.logger.debug(
                "Refund for order without commission",
                extra={"order_id": order_id},
            )
            return None

        if original.order_total == 0:
            self.logger.info(
                "Commission already fully refunded",
                extra={"order_id": order_id, "commission_id": original.id},
            )
            return None

        if original.status not in (
            CommissionStatus.PAID,
            *CommissionStatus.OPEN,
        ):
            self.logger.info(
                "Refund ignored for closed commission",
                extra={
                    "order_id": order_id,
                    "commission_id": original.id,
                    "status": original.status,
                },
            )
            return None

        if refund > original.order_total:
            raise InvalidArgument(
                "Refund amount exceeds the attributed order total"
            )

        if original.status == CommissionStatus.PAID:
            return await self._append_compensation(original, refund, actor)

        return await self._adjust_in_place(original, refund, actor)

    async def _append_compensation(
        self, original: Commission, refund: Decimal, actor: str
    ) -> Commission:
        compensating = await self.commission_service.create_commission(
            affiliate_id=original.affiliate_id,
            order_id=original.order_id,
            order_total=-refund,
            commission_rate=original.commission_rate,
            click_id=original.click_id,
            status=CommissionStatus.APPROVED,
            adjusts_commission_id=original.id,
            actor_id=actor,
        )

        self.logger.info(
            "Compensating commission created for refund",
            extra={
                "order_id": original.order_id,
                "original_commission_id": original.id,
                "commission_id": compensating.id,
                "amount": str(compensating.commission_amount),
            },
        )
        return compensating

    async def _adjust_in_place(
        self, original: Commission, refund: Decimal, actor: str
    ) -> Commission:
        new_order_total = original.order_total - refund
        new_amount = calculate_commission(
            new_order_total, original.commission_rate
        )

        updated = await self.commission_repo.adjust_in_place(
            original, new_order_total, new_amount, actor
        )
        if not updated:
            raise ConflictAlready(
                f"Commission {original.id} changed while applying refund"
            )

        self.logger.info(
            "Commission adjusted for refund",
            extra={
                "order_id": original.order_id,
                "commission_id": original.id,
                "refund_amount": str(refund),
                "new_order_total": str(new_order_total),
                "new_amount": str(new_amount),
            },
        )
        return await self.commission_service.get_commission(original.id)
