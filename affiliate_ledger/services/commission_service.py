"""
Commission service.

Commission calculator and ledger state machine:

    pending -> approved -> paid
    pending|approved -> disputed
    pending|approved -> cancelled

Every transition is a conditional update keyed on the expected current
status. Disputed commissions are frozen.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.config.business_constants import MONEY_QUANTUM
from affiliate_ledger.models.commission import Commission
from affiliate_ledger.models.enums import CommissionStatus
from affiliate_ledger.repositories.commission_repository import (
    CommissionRepository,
)
from affiliate_ledger.services.base_service import BaseService, transaction
from affiliate_ledger.utils.datetime_utils import utc_now
from affiliate_ledger.utils.exceptions import InvalidArgument, NotFound
from affiliate_ledger.utils.validation import require_actor, to_decimal


def calculate_commission(
    order_total: Decimal | int | str, commission_rate: Decimal | int | str
) -> Decimal:
    """
    Calculate commission amount for an order total.

    Examples:
        >>> calculate_commission(Decimal("1000"), Decimal("0.10"))
        Decimal('100.00000000')
        >>> calculate_commission(Decimal("-500"), Decimal("0.10"))
        Decimal('-50.00000000')

    Args:
        order_total: Order total (negative for compensating entries)
        commission_rate: Rate as a fraction

    Returns:
        order_total * commission_rate at storage precision
    """
    amount = to_decimal(order_total, "Order total") * to_decimal(
        commission_rate, "Commission rate"
    )
    return amount.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


class CommissionService(BaseService):
    """Commission ledger service."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize commission service."""
        super().__init__(session)
        self.commission_repo = CommissionRepository(session)

    async def create_commission(
        self,
        affiliate_id: int,
        order_id: int,
        order_total: Decimal,
        commission_rate: Decimal,
        click_id: int | None = None,
        status: str = CommissionStatus.PENDING,
        adjusts_commission_id: int | None = None,
        actor_id: str | None = None,
    ) -> Commission:
        """
        Insert ledger row with snapshot of order total and rate.

        Runs inside the caller's transaction.

        Returns:
            Created commission
        """
        commission_amount = calculate_commission(order_total, commission_rate)

        commission = await self.commission_repo.create(
            affiliate_id=affiliate_id,
            order_id=order_id,
            click_id=click_id,
            adjusts_commission_id=adjusts_commission_id,
            order_total=order_total,
            commission_rate=commission_rate,
            commission_amount=commission_amount,
            status=status,
            created_by=actor_id,
            updated_by=actor_id,
        )

        self.logger.info(
            "Commission created",
            extra={
                "commission_id": commission.id,
                "affiliate_id": affiliate_id,
                "order_id": order_id,
                "amount": str(commission_amount),
                "status": status,
                "adjusts_commission_id": adjusts_commission_id,
            },
        )
        return commission

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    @transaction
    async def approve_commission(
        self, commission_id: int, actor_id: str
    ) -> Commission:
        """
        Approve pending commission.

        Raises:
            NotFound: If commission does not exist
            ConflictAlready: If commission is not pending
        """
        actor = require_actor(actor_id)

        updated = await self.commission_repo.transition(
            commission_id,
            (CommissionStatus.PENDING,),
            CommissionStatus.APPROVED,
            updated_by=actor,
        )
        await self.ensure_transitioned(
            updated, self.commission_repo, commission_id, "Commission"
        )

        self.logger.info(
            "Commission approved",
            extra={"commission_id": commission_id, "actor_id": actor},
        )
        return await self.get_commission(commission_id)

    @transaction
    async def mark_commission_paid(
        self,
        commission_id: int,
        payment_method: str,
        payment_reference: str,
        actor_id: str,
        notes: str | None = None,
    ) -> Commission:
        """
        Settle a single commission outside a payout batch.

        Args:
            commission_id: Commission ID
            payment_method: Settlement method
            payment_reference: External payment reference
            actor_id: Admin recording the payment
            notes: Optional payment notes

        Raises:
            InvalidArgument: If reference or actor is missing
            NotFound: If commission does not exist
            ConflictAlready: If commission is not pending or approved
        """
        actor = require_actor(actor_id)
        if not payment_reference or not str(payment_reference).strip():
            raise InvalidArgument("Payment reference is required")

        updated = await self.commission_repo.transition(
            commission_id,
            CommissionStatus.OPEN,
            CommissionStatus.PAID,
            paid_at=utc_now(),
            payment_method=payment_method,
            payment_reference=payment_reference,
            payment_notes=notes,
            updated_by=actor,
        )
        await self.ensure_transitioned(
            updated, self.commission_repo, commission_id, "Commission"
        )

        self.logger.info(
            "Commission marked as paid",
            extra={
                "commission_id": commission_id,
                "payment_method": payment_method,
                "payment_reference": payment_reference,
                "actor_id": actor,
            },
        )
        return await self.get_commission(commission_id)

    @transaction
    async def dispute_commission(
        self, commission_id: int, actor_id: str
    ) -> Commission:
        """Freeze pending or approved commission as disputed."""
        actor = require_actor(actor_id)

        updated = await self.commission_repo.transition(
            commission_id,
            CommissionStatus.OPEN,
            CommissionStatus.DISPUTED,
            updated_by=actor,
        )
        await self.ensure_transitioned(
            updated, self.commission_repo, commission_id, "Commission"
        )

        self.logger.warning(
            "Commission disputed",
            extra={"commission_id": commission_id, "actor_id": actor},
        )
        return await self.get_commission(commission_id)

    @transaction
    async def dispute_order_commissions(
        self, order_id: int, actor_id: str
    ) -> int:
        """
        Dispute every open commission of an order.

        Returns:
            Number of disputed commissions
        """
        actor = require_actor(actor_id)

        disputed = await self.commission_repo.dispute_for_order(
            order_id, actor
        )

        self.logger.warning(
            "Order commissions disputed",
            extra={"order_id": order_id, "count": disputed, "actor_id": actor},
        )
        return disputed

    @transaction
    async def cancel_commission(
        self, commission_id: int, actor_id: str
    ) -> Commission:
        """Cancel pending or approved commission."""
        actor = require_actor(actor_id)

        updated = await self.commission_repo.transition(
            commission_id,
            CommissionStatus.OPEN,
            CommissionStatus.CANCELLED,
            updated_by=actor,
        )
        await self.ensure_transitioned(
            updated, self.commission_repo, commission_id, "Commission"
        )

        self.logger.info(
            "Commission cancelled",
            extra={"commission_id": commission_id, "actor_id": actor},
        )
        return await self.get_commission(commission_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_commission(self, commission_id: int) -> Commission:
        """Get commission by ID or raise NotFound."""
        commission = await self.commission_repo.get_by_id(commission_id)
        if not commission:
            raise NotFound(f"Commission {commission_id} not found")
        return commission

    async def list_by_affiliate(
        self, affiliate_id: int, status: str | None = None
    ) -> list[Commission]:
        """List commissions of affiliate, newest first."""
        return await self.list_all(status=status, affiliate_id=affiliate_id)

    async def list_pending(
        self, affiliate_id: int | None = None
    ) -> list[Commission]:
        """List pending commissions awaiting approval."""
        return await self.list_all(
            status=CommissionStatus.PENDING, affiliate_id=affiliate_id
        )

    async def list_all(
        self,
        status: str | None = None,
        affiliate_id: int | None = None,
    ) -> list[Commission]:
        """List commissions with optional status and affiliate filters."""
        if status is not None and status not in CommissionStatus.ALL:
            raise InvalidArgument(f"Unknown commission status: {status}")
        return await self.commission_repo.list_filtered(affiliate_id, status)

    async def list_for_order(self, order_id: int) -> list[Commission]:
        """List original and compensating rows of an order."""
        return await self.commission_repo.list_for_order(order_id)

    async def get_commission_stats(
        self,
        affiliate_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> dict[str, int | Decimal]:
        """Commission counts and amounts for every status."""
        return await self.commission_repo.get_stats(affiliate_id, start, end)
