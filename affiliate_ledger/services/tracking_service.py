"""
Tracking service.

Records referral clicks as attribution sessions and serves click and
conversion projections.
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.attribution_session import AttributionSession
from affiliate_ledger.repositories.affiliate_repository import (
    AffiliateLinkRepository,
    AffiliateRepository,
)
from affiliate_ledger.repositories.attribution_session_repository import (
    AttributionSessionRepository,
)
from affiliate_ledger.repositories.commission_repository import CommissionRepository
from affiliate_ledger.schemas.tracking import ClickMetadata
from affiliate_ledger.services.base_service import BaseService, transaction
from affiliate_ledger.utils.exceptions import (
    InvalidReferral,
    invalid_argument_from,
)
from affiliate_ledger.utils.formatters import conversion_rate_percent


class TrackingService(BaseService):
    """Click and attribution session tracker."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize tracking service."""
        super().__init__(session)
        self.affiliate_repo = AffiliateRepository(session)
        self.link_repo = AffiliateLinkRepository(session)
        self.session_repo = AttributionSessionRepository(session)
        self.commission_repo = CommissionRepository(session)

    @transaction
    async def track_click(
        self,
        affiliate_code: str,
        metadata: ClickMetadata | dict[str, Any] | None = None,
    ) -> str:
        """
        Record referral click and open an attribution session.

        Args:
            affiliate_code: Referral code from the tracked URL
            metadata: Request metadata (referrer, address, link, ...)

        Returns:
            Session token to carry until checkout

        Raises:
            InvalidReferral: If code is unknown, affiliate is not active, or
                the link is not an active link of that affiliate
        """
        if metadata is None:
            metadata = ClickMetadata()
        elif not isinstance(metadata, ClickMetadata):
            try:
                metadata = ClickMetadata.model_validate(metadata)
            except ValidationError as e:
                raise invalid_argument_from(e) from e

        affiliate = await self.affiliate_repo.get_active_by_code(
            affiliate_code
        )
        if not affiliate:
            raise InvalidReferral("Invalid affiliate code")

        if metadata.link_id is not None:
            link = await self.link_repo.get_active_for_affiliate(
                metadata.link_id, affiliate.id
            )
            if not link:
                raise InvalidReferral("Invalid affiliate link")

        session_token = str(uuid.uuid4())

        await self.session_repo.create(
            session_token=session_token,
            affiliate_id=affiliate.id,
            affiliate_link_id=metadata.link_id,
            ip_address=metadata.ip_address,
            user_agent=metadata.user_agent,
            referrer=metadata.referrer,
            landing_page=metadata.landing_page,
            campaign=metadata.campaign,
            converted=False,
        )

        self.logger.debug(
            "Affiliate click tracked",
            extra={
                "affiliate_id": affiliate.id,
                "link_id": metadata.link_id,
            },
        )
        return session_token

    async def get_attribution(
        self, session_token: str
    ) -> AttributionSession | None:
        """Get attribution session by token."""
        return await self.session_repo.get_by_token(session_token)

    async def list_clicks(
        self,
        affiliate_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[AttributionSession]:
        """List clicks of affiliate, newest first."""
        return await self.session_repo.list_by_affiliate(
            affiliate_id, start, end
        )

    async def list_conversions(
        self,
        affiliate_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[AttributionSession]:
        """List converted clicks of affiliate, newest first."""
        return await self.session_repo.list_by_affiliate(
            affiliate_id, start, end, converted=True
        )

    async def get_tracking_stats(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> dict[str, Any]:
        """
        Program-wide click statistics.

        Returns:
            Dict with total_clicks, total_conversions, conversion_rate
            (percent), active_affiliates (distinct affiliates clicked) and
            total_commissions (summed commission amount)
        """
        clicks, conversions = await self.session_repo.get_conversion_counts(
            None, start, end
        )
        active_affiliates = await self.session_repo.count_active_affiliates(
            start, end
        )
        commission_stats = await self.commission_repo.get_stats(None, start, end)

        return {
            "total_clicks": clicks,
            "total_conversions": conversions,
            "conversion_rate": conversion_rate_percent(clicks, conversions),
            "active_affiliates": active_affiliates,
            "total_commissions": commission_stats["total_amount"],
        }
