"""
Order repository.

Read access to storefront orders plus the affiliate annotation columns.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.order import Order
from affiliate_ledger.repositories.base import BaseRepository


class OrderRepository(BaseRepository[Order]):
    """Order repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize order repository."""
        super().__init__(Order, session)

    async def count_recent_for_affiliate(
        self, affiliate_id: int, since: datetime
    ) -> int:
        """Count orders attributed to affiliate since time."""
        stmt = select(func.count(Order.id)).where(
            Order.affiliate_id == affiliate_id,
            Order.created_at >= since,
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def annotate_attribution(
        self,
        order_id: int,
        affiliate_id: int,
        click_id: int,
        commission_amount: Decimal,
    ) -> int:
        """
        Record affiliate attribution on the order row.

        Returns:
            Number of updated rows (0 or 1)
        """
        return await self.update_where(
            order_id,
            affiliate_id=affiliate_id,
            affiliate_click_id=click_id,
            affiliate_commission_amount=commission_amount,
        )
