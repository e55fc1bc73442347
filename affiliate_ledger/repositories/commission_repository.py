"""
Commission repository.

Data access layer for Commission model. Every status mutation is a
conditional UPDATE keyed on the expected current status.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.commission import Commission
from affiliate_ledger.models.enums import CommissionStatus, PayoutStatus
from affiliate_ledger.models.payout import Payout, PayoutCommission
from affiliate_ledger.repositories.base import BaseRepository


class CommissionRepository(BaseRepository[Commission]):
    """Commission repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize commission repository."""
        super().__init__(Commission, session)

    async def transition(
        self,
        commission_id: int,
        from_statuses: tuple[str, ...],
        to_status: str,
        **values: Any,
    ) -> int:
        """
        Move commission to a new status if it is in one of from_statuses.

        Args:
            commission_id: Commission ID
            from_statuses: Allowed current statuses
            to_status: Target status
            **values: Extra columns to set

        Returns:
            Number of updated rows (0 or 1)
        """
        return await self.update_where(
            commission_id,
            [Commission.status.in_(from_statuses)],
            status=to_status,
            **values,
        )

    async def get_original_for_order(
        self, order_id: int
    ) -> Commission | None:
        """
        Get the conversion-time commission for an order.

        Compensating entries (adjusts_commission_id set) are skipped.
        """
        stmt = (
            select(Commission)
            .where(
                Commission.order_id == order_id,
                Commission.adjusts_commission_id.is_(None),
            )
            .order_by(Commission.id.asc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_order(self, order_id: int) -> list[Commission]:
        """List all ledger rows for an order, oldest first."""
        stmt = (
            select(Commission)
            .where(Commission.order_id == order_id)
            .order_by(Commission.id.asc())
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_filtered(
        self,
        affiliate_id: int | None = None,
        status: str | None = None,
    ) -> list[Commission]:
        """
        List commissions, newest first.

        Args:
            affiliate_id: Optional affiliate filter
            status: Optional status filter

        Returns:
            Matching commissions
        """
        stmt = select(Commission)
        if affiliate_id is not None:
            stmt = stmt.where(Commission.affiliate_id == affiliate_id)
        if status:
            stmt = stmt.where(Commission.status == status)

        stmt = stmt.order_by(
            Commission.created_at.desc(), Commission.id.desc()
        ).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_batchable(
        self, affiliate_id: int, commission_ids: list[int]
    ) -> list[Commission]:
        """
        Get approved commissions of affiliate that can join a new payout.

        Commissions already linked to a pending or processing payout are
        excluded so one commission cannot be settled twice.

        Args:
            affiliate_id: Owning affiliate
            commission_ids: Requested commission IDs

        Returns:
            Eligible commissions among the requested IDs
        """
        in_open_payout = (
            select(PayoutCommission.commission_id)
            .join(Payout, Payout.id == PayoutCommission.payout_id)
            .where(Payout.status.in_(PayoutStatus.OPEN))
        )
        stmt = select(Commission).where(
            Commission.affiliate_id == affiliate_id,
            Commission.status == CommissionStatus.APPROVED,
            Commission.id.in_(commission_ids),
            Commission.id.not_in(in_open_payout),
        ).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def dispute_for_order(
        self, order_id: int, actor_id: str
    ) -> int:
        """
        Dispute every open commission of an order.

        Returns:
            Number of disputed rows
        """
        stmt = (
            update(Commission)
            .where(
                Commission.order_id == order_id,
                Commission.status.in_(CommissionStatus.OPEN),
            )
            .values(status=CommissionStatus.DISPUTED, updated_by=actor_id)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def adjust_in_place(
        self,
        commission: Commission,
        new_order_total: Decimal,
        new_commission_amount: Decimal,
        actor_id: str,
    ) -> int:
        """
        Reduce an unpaid commission after a refund.

        The observed status and order_total are part of the predicate so a
        concurrent payout or refund turns this into a zero-row update.

        Returns:
            Number of updated rows (0 or 1)
        """
        return await self.update_where(
            commission.id,
            [
                Commission.status == commission.status,
                Commission.order_total == commission.order_total,
            ],
            order_total=new_order_total,
            commission_amount=new_commission_amount,
            updated_by=actor_id,
        )

    async def mark_paid_for_payout(
        self,
        payout_id: int,
        paid_at: datetime,
        payment_method: str | None,
        payment_reference: str,
        actor_id: str,
    ) -> int:
        """
        Cascade paid status onto the approved commissions of a payout.

        Returns:
            Number of commissions moved to paid
        """
        linked = select(PayoutCommission.commission_id).where(
            PayoutCommission.payout_id == payout_id
        )
        stmt = (
            update(Commission)
            .where(
                Commission.id.in_(linked),
                Commission.status == CommissionStatus.APPROVED,
            )
            .values(
                status=CommissionStatus.PAID,
                paid_at=paid_at,
                payment_method=payment_method,
                payment_reference=payment_reference,
                updated_by=actor_id,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def get_stats(
        self,
        affiliate_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> dict[str, int | Decimal]:
        """
        Get commission counts and amounts per status in a single query.

        Args:
            affiliate_id: Optional affiliate filter
            start: Inclusive lower bound on created_at
            end: Inclusive upper bound on created_at

        Returns:
            Dict with total and per-status counts and amounts
        """
        stmt = select(
            Commission.status,
            func.count(Commission.id).label("count"),
            func.coalesce(func.sum(Commission.commission_amount), 0).label("amount"),
        )
        if affiliate_id is not None:
            stmt = stmt.where(Commission.affiliate_id == affiliate_id)
        if start:
            stmt = stmt.where(Commission.created_at >= start)
        if end:
            stmt = stmt.where(Commission.created_at <= end)
        stmt = stmt.group_by(Commission.status)

        result = await self.session.execute(stmt)
        rows = result.all()

        stats: dict[str, int | Decimal] = {
            "total_commissions": 0,
            "total_amount": Decimal("0"),
        }
        for status in CommissionStatus.ALL:
            stats[f"{status}_commissions"] = 0
            stats[f"{status}_amount"] = Decimal("0")

        for row in rows:
            amount = Decimal(str(row.amount))
            stats["total_commissions"] += row.count
            stats["total_amount"] += amount
            stats[f"{row.status}_commissions"] = row.count
            stats[f"{row.status}_amount"] = amount

        return stats
