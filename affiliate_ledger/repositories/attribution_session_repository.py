"""
Attribution session repository.

Data access layer for AttributionSession (affiliate click) model.
"""

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.attribution_session import AttributionSession
from affiliate_ledger.repositories.base import BaseRepository


class AttributionSessionRepository(BaseRepository[AttributionSession]):
    """Attribution session repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize attribution session repository."""
        super().__init__(AttributionSession, session)

    async def get_by_token(
        self, session_token: str
    ) -> AttributionSession | None:
        """Get session by token regardless of conversion state."""
        return await self.get_by(session_token=session_token)

    async def mark_converted(
        self, session_token: str, order_id: int, converted_at: datetime
    ) -> int:
        """
        Atomically convert an open session.

        `converted = false` is part of the UPDATE predicate: of two
        concurrent callers only one sees an affected row.

        Args:
            session_token: Attribution session token
            order_id: Converting order ID
            converted_at: Conversion timestamp

        Returns:
            Number of converted rows (0 or 1)
        """
        stmt = (
            update(AttributionSession)
            .where(
                AttributionSession.session_token == session_token,
                AttributionSession.converted == False,  # noqa: E712
            )
            .values(
                converted=True,
                conversion_order_id=order_id,
                converted_at=converted_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def list_by_affiliate(
        self,
        affiliate_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
        converted: bool | None = None,
    ) -> list[AttributionSession]:
        """
        List sessions for affiliate within optional date range.

        Args:
            affiliate_id: Affiliate ID
            start: Inclusive lower bound on created_at
            end: Inclusive upper bound on created_at
            converted: Optional conversion state filter

        Returns:
            Sessions, newest first
        """
        stmt = select(AttributionSession).where(
            AttributionSession.affiliate_id == affiliate_id
        )
        if start:
            stmt = stmt.where(AttributionSession.created_at >= start)
        if end:
            stmt = stmt.where(AttributionSession.created_at <= end)
        if converted is not None:
            stmt = stmt.where(AttributionSession.converted == converted)

        stmt = stmt.order_by(
            AttributionSession.created_at.desc()
        ).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_from_address(
        self, affiliate_id: int, ip_address: str, since: datetime
    ) -> int:
        """Count clicks for affiliate from one network address since time."""
        stmt = select(func.count(AttributionSession.id)).where(
            AttributionSession.affiliate_id == affiliate_id,
            AttributionSession.ip_address == ip_address,
            AttributionSession.created_at >= since,
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def get_conversion_counts(
        self,
        affiliate_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> tuple[int, int]:
        """
        Count clicks and conversions in a single query.

        Args:
            affiliate_id: Optional affiliate filter
            start: Inclusive lower bound on created_at
            end: Inclusive upper bound on created_at

        Returns:
            Tuple of (total_clicks, converted_clicks)
        """
        converted_count = func.count(AttributionSession.id).filter(
            AttributionSession.converted == True  # noqa: E712
        )
        stmt = select(
            func.count(AttributionSession.id).label("total"),
            converted_count.label("converted"),
        )
        if affiliate_id is not None:
            stmt = stmt.where(AttributionSession.affiliate_id == affiliate_id)
        if start:
            stmt = stmt.where(AttributionSession.created_at >= start)
        if end:
            stmt = stmt.where(AttributionSession.created_at <= end)

        result = await self.session.execute(stmt)
        row = result.one()
        return row.total or 0, row.converted or 0

    async def count_active_affiliates(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> int:
        """Count distinct affiliates with at least one click in range."""
        stmt = select(
            func.count(func.distinct(AttributionSession.affiliate_id))
        )
        if start:
            stmt = stmt.where(AttributionSession.created_at >= start)
        if end:
            stmt = stmt.where(AttributionSession.created_at <= end)

        result = await self.session.execute(stmt)
        return result.scalar() or 0
