"""
Payout repository.

Data access layer for Payout and PayoutCommission models.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.enums import PayoutStatus
from affiliate_ledger.models.payout import Payout, PayoutCommission
from affiliate_ledger.repositories.base import BaseRepository


class PayoutRepository(BaseRepository[Payout]):
    """Payout repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize payout repository."""
        super().__init__(Payout, session)

    async def link_commissions(
        self, payout_id: int, commission_ids: list[int]
    ) -> None:
        """
        Insert join rows for payout commissions.

        Args:
            payout_id: Payout ID
            commission_ids: Commissions covered by the payout
        """
        self.session.add_all(
            [
                PayoutCommission(payout_id=payout_id, commission_id=cid)
                for cid in commission_ids
            ]
        )
        await self.session.flush()

    async def get_commission_ids(self, payout_id: int) -> list[int]:
        """Get IDs of commissions linked to payout."""
        stmt = (
            select(PayoutCommission.commission_id)
            .where(PayoutCommission.payout_id == payout_id)
            .order_by(PayoutCommission.commission_id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def transition(
        self,
        payout_id: int,
        from_statuses: tuple[str, ...],
        to_status: str,
        **values: Any,
    ) -> int:
        """
        Move payout to a new status if it is in one of from_statuses.

        Returns:
            Number of updated rows (0 or 1)
        """
        return await self.update_where(
            payout_id,
            [Payout.status.in_(from_statuses)],
            status=to_status,
            **values,
        )

    async def list_payouts(
        self, affiliate_id: int | None = None
    ) -> list[Payout]:
        """List payouts, newest first, optionally for one affiliate."""
        if affiliate_id is not None:
            return await self.find_by(affiliate_id=affiliate_id)
        return await self.find_by()

    async def get_stats(self) -> dict[str, int | Decimal]:
        """
        Get payout counts and amounts per status in a single query.

        Returns:
            Dict with total, pending and completed counts and amounts
        """
        stmt = select(
            Payout.status,
            func.count(Payout.id).label("count"),
            func.coalesce(func.sum(Payout.total_amount), 0).label("amount"),
        ).group_by(Payout.status)

        result = await self.session.execute(stmt)
        rows = result.all()

        stats: dict[str, int | Decimal] = {
            "total_payouts": 0,
            "total_amount": Decimal("0"),
        }
        for status in PayoutStatus.ALL:
            stats[f"{status}_payouts"] = 0
            stats[f"{status}_amount"] = Decimal("0")

        for row in rows:
            amount = Decimal(str(row.amount))
            stats["total_payouts"] += row.count
            stats["total_amount"] += amount
            stats[f"{row.status}_payouts"] = row.count
            stats[f"{row.status}_amount"] = amount

        return stats
