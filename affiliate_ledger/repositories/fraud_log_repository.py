"""
Fraud log repository.

Data access layer for FraudLog model. Append-only: no update helpers.
"""

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.fraud_log import FraudLog
from affiliate_ledger.repositories.base import BaseRepository


class FraudLogRepository(BaseRepository[FraudLog]):
    """Fraud log repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize fraud log repository."""
        super().__init__(FraudLog, session)

    async def list_by_affiliate(self, affiliate_id: int) -> list[FraudLog]:
        """List fraud logs for affiliate, newest first."""
        return await self.find_by(affiliate_id=affiliate_id)

    async def get_summary(
        self, affiliate_id: int, recent_since: datetime
    ) -> tuple[int, int, float]:
        """
        Summarize fraud history of an affiliate in a single query.

        Args:
            affiliate_id: Affiliate ID
            recent_since: Lower bound for the recent-flags counter

        Returns:
            Tuple of (total_flags, recent_flags, average_risk_score)
        """
        recent_count = func.count(FraudLog.id).filter(
            FraudLog.created_at >= recent_since
        )
        stmt = select(
            func.count(FraudLog.id).label("total"),
            recent_count.label("recent"),
            func.coalesce(func.avg(FraudLog.risk_score), 0).label("average"),
        ).where(FraudLog.affiliate_id == affiliate_id)

        result = await self.session.execute(stmt)
        row = result.one()
        return row.total or 0, row.recent or 0, float(row.average or 0)
