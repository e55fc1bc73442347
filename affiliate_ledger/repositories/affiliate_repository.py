"""
Affiliate repository.

Data access layer for Affiliate and AffiliateLink models.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.affiliate import Affiliate
from affiliate_ledger.models.affiliate_link import AffiliateLink
from affiliate_ledger.models.enums import AffiliateStatus
from affiliate_ledger.repositories.base import BaseRepository


class AffiliateRepository(BaseRepository[Affiliate]):
    """Affiliate repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize affiliate repository."""
        super().__init__(Affiliate, session)

    async def get_by_code(self, affiliate_code: str) -> Affiliate | None:
        """Get affiliate by referral code regardless of status."""
        return await self.get_by(affiliate_code=affiliate_code)

    async def get_active_by_code(
        self, affiliate_code: str
    ) -> Affiliate | None:
        """
        Get affiliate by referral code, only if active.

        Args:
            affiliate_code: Public referral code

        Returns:
            Active affiliate or None
        """
        return await self.get_by(
            affiliate_code=affiliate_code, status=AffiliateStatus.ACTIVE
        )

    async def get_by_user_id(self, user_id: str) -> Affiliate | None:
        """Get affiliate by external account ID."""
        return await self.get_by(user_id=user_id)

    async def list_by_status(
        self, status: str | None = None
    ) -> list[Affiliate]:
        """List affiliates, newest first, optionally filtered by status."""
        if status:
            return await self.find_by(status=status)
        return await self.find_by()

    async def set_status(
        self,
        affiliate_id: int,
        status: str,
        allowed_from: tuple[str, ...] | None = None,
        **values: Any,
    ) -> int:
        """
        Set affiliate status with optional precondition on current status.

        Args:
            affiliate_id: Affiliate ID
            status: New status
            allowed_from: Statuses the row must currently be in
            **values: Extra columns to set

        Returns:
            Number of updated rows
        """
        conditions = []
        if allowed_from:
            conditions.append(Affiliate.status.in_(allowed_from))

        return await self.update_where(
            affiliate_id, conditions, status=status, **values
        )

    async def add_to_aggregates(
        self, affiliate_id: int, **deltas: Decimal
    ) -> int:
        """
        Increment lifetime aggregate columns in place.

        Args:
            affiliate_id: Affiliate ID
            **deltas: Column name to signed increment

        Returns:
            Number of updated rows
        """
        values = {
            name: getattr(Affiliate, name) + delta
            for name, delta in deltas.items()
        }
        return await self.update_where(affiliate_id, **values)

    async def get_program_stats(self) -> dict[str, int | Decimal]:
        """
        Aggregate program-wide counters in a single query.

        Returns:
            Dict with affiliate counts per status and summed lifetime totals
        """
        stmt = (
            select(
                Affiliate.status,
                func.count(Affiliate.id).label("count"),
                func.coalesce(func.sum(Affiliate.total_sales), 0).label("total_sales"),
                func.coalesce(func.sum(Affiliate.total_commissions), 0).label("total_commissions"),
                func.coalesce(func.sum(Affiliate.pending_commissions), 0).label("pending_commissions"),
                func.coalesce(func.sum(Affiliate.paid_commissions), 0).label("paid_commissions"),
            )
            .group_by(Affiliate.status)
        )

        result = await self.session.execute(stmt)
        rows = result.all()

        stats: dict[str, int | Decimal] = {
            "total_affiliates": 0,
            "active_affiliates": 0,
            "pending_affiliates": 0,
            "suspended_affiliates": 0,
            "rejected_affiliates": 0,
            "total_sales": Decimal("0"),
            "total_commissions": Decimal("0"),
            "pending_commissions": Decimal("0"),
            "paid_commissions": Decimal("0"),
        }

        for row in rows:
            stats["total_affiliates"] += row.count
            stats[f"{row.status}_affiliates"] = row.count
            stats["total_sales"] += Decimal(str(row.total_sales))
            stats["total_commissions"] += Decimal(str(row.total_commissions))
            stats["pending_commissions"] += Decimal(str(row.pending_commissions))
            stats["paid_commissions"] += Decimal(str(row.paid_commissions))

        return stats


class AffiliateLinkRepository(BaseRepository[AffiliateLink]):
    """Tracked link repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize link repository."""
        super().__init__(AffiliateLink, session)

    async def list_by_affiliate(
        self, affiliate_id: int
    ) -> list[AffiliateLink]:
        """List links owned by affiliate, newest first."""
        return await self.find_by(affiliate_id=affiliate_id)

    async def get_active_for_affiliate(
        self, link_id: int, affiliate_id: int
    ) -> AffiliateLink | None:
        """Get link only if it belongs to affiliate and is active."""
        return await self.get_by(
            id=link_id, affiliate_id=affiliate_id, is_active=True
        )
