"""
Affiliate service.

Affiliate registry: registration, referral code minting, lifecycle status,
commission rate and tracked links. Also serves reporting projections.
"""

import secrets
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.config.business_constants import (
    AFFILIATE_CODE_ALPHABET,
    AFFILIATE_CODE_LENGTH,
    AFFILIATE_CODE_MAX_ATTEMPTS,
    DEFAULT_COMMISSION_RATE,
)
from affiliate_ledger.models.affiliate import Affiliate
from affiliate_ledger.models.affiliate_link import AffiliateLink
from affiliate_ledger.models.enums import AffiliateStatus
from affiliate_ledger.repositories.affiliate_repository import (
    AffiliateLinkRepository,
    AffiliateRepository,
)
from affiliate_ledger.repositories.attribution_session_repository import (
    AttributionSessionRepository,
)
from affiliate_ledger.repositories.commission_repository import (
    CommissionRepository,
)
from affiliate_ledger.schemas.affiliate import AffiliateRegistration, LinkRequest
from affiliate_ledger.services.base_service import BaseService, transaction
from affiliate_ledger.services.notification import LedgerNotifier
from affiliate_ledger.services.notification.templates import (
    affiliate_approved_email,
)
from affiliate_ledger.utils.datetime_utils import utc_now
from affiliate_ledger.utils.formatters import conversion_rate_percent
from affiliate_ledger.utils.exceptions import (
    InvalidArgument,
    LedgerError,
    NotFound,
    invalid_argument_from,
)
from affiliate_ledger.utils.validation import (
    require_actor,
    validate_commission_rate,
)


def generate_affiliate_code() -> str:
    """Mint a random uppercase alphanumeric referral code."""
    return "".join(
        secrets.choice(AFFILIATE_CODE_ALPHABET)
        for _ in range(AFFILIATE_CODE_LENGTH)
    )


class AffiliateService(BaseService):
    """Affiliate registry service."""

    def __init__(
        self,
        session: AsyncSession,
        notifier: LedgerNotifier | None = None,
        default_commission_rate: Decimal = DEFAULT_COMMISSION_RATE,
    ) -> None:
        """
        Initialize affiliate service.

        Args:
            session: Database session
            notifier: Optional best-effort notifier
            default_commission_rate: Rate assigned on registration
        """
        super().__init__(session)
        self.affiliate_repo = AffiliateRepository(session)
        self.link_repo = AffiliateLinkRepository(session)
        self.session_repo = AttributionSessionRepository(session)
        self.commission_repo = CommissionRepository(session)
        self.notifier = notifier
        self.default_commission_rate = validate_commission_rate(
            default_commission_rate
        )

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    @transaction
    async def register_affiliate(
        self, profile: AffiliateRegistration | dict[str, Any]
    ) -> Affiliate:
        """
        Register affiliate in pending status.

        Args:
            profile: Registration profile (model or raw dict)

        Returns:
            Created affiliate with minted referral code

        Raises:
            InvalidArgument: If profile is invalid or email/user ID is taken
        """
        if not isinstance(profile, AffiliateRegistration):
            try:
                profile = AffiliateRegistration.model_validate(profile)
            except ValidationError as e:
                raise invalid_argument_from(e) from e

        if await self.affiliate_repo.exists(email=profile.email):
            raise InvalidArgument("Affiliate with this email already exists")

        if profile.user_id and await self.affiliate_repo.exists(
            user_id=profile.user_id
        ):
            raise InvalidArgument("User already has an affiliate account")

        affiliate_code = await self._mint_unique_code()

        try:
            affiliate = await self.affiliate_repo.create(
                **profile.model_dump(),
                affiliate_code=affiliate_code,
                status=AffiliateStatus.PENDING,
                commission_rate=self.default_commission_rate,
            )
        except IntegrityError as e:
            raise InvalidArgument(
                "Affiliate with this email or user ID already exists"
            ) from e

        self.logger.info(
            "Affiliate registered",
            extra={
                "affiliate_id": affiliate.id,
                "affiliate_code": affiliate_code,
            },
        )
        return affiliate

    async def _mint_unique_code(self) -> str:
        """Generate referral code not used by any affiliate."""
        for _ in range(AFFILIATE_CODE_MAX_ATTEMPTS):
            code = generate_affiliate_code()
            if not await self.affiliate_repo.exists(affiliate_code=code):
                return code

        raise LedgerError("Could not generate a unique affiliate code")

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    async def get_by_id(self, affiliate_id: int) -> Affiliate:
        """Get affiliate by ID or raise NotFound."""
        affiliate = await self.affiliate_repo.get_by_id(affiliate_id)
        if not affiliate:
            raise NotFound(f"Affiliate {affiliate_id} not found")
        return affiliate

    async def get_by_code(self, affiliate_code: str) -> Affiliate:
        """Get affiliate by referral code (any status) or raise NotFound."""
        affiliate = await self.affiliate_repo.get_by_code(affiliate_code)
        if not affiliate:
            raise NotFound(f"Affiliate code {affiliate_code} not found")
        return affiliate

    async def get_active_by_code(
        self, affiliate_code: str
    ) -> Affiliate | None:
        """Get active affiliate by referral code."""
        return await self.affiliate_repo.get_active_by_code(affiliate_code)

    async def get_by_user_id(self, user_id: str) -> Affiliate:
        """Get affiliate by external account ID or raise NotFound."""
        affiliate = await self.affiliate_repo.get_by_user_id(user_id)
        if not affiliate:
            raise NotFound(f"Affiliate for user {user_id} not found")
        return affiliate

    async def list_affiliates(
        self, status: str | None = None
    ) -> list[Affiliate]:
        """List affiliates, newest first, optionally filtered by status."""
        if status is not None and status not in AffiliateStatus.ALL:
            raise InvalidArgument(f"Unknown affiliate status: {status}")
        return await self.affiliate_repo.list_by_status(status)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def approve_affiliate(
        self, affiliate_id: int, actor_id: str
    ) -> Affiliate:
        """
        Activate affiliate.

        Approving an already active affiliate is a no-op. Suspended and
        rejected affiliates are re-activated. An approval email is sent
        after commit when the status actually changed.

        Args:
            affiliate_id: Affiliate ID
            actor_id: Approving admin

        Returns:
            Active affiliate
        """
        affiliate, activated = await self._activate(affiliate_id, actor_id)

        if activated and self.notifier:
            subject, html, text = affiliate_approved_email(affiliate)
            self.notifier.send_email(affiliate.email, subject, html, text)

        return affiliate

    @transaction
    async def _activate(
        self, affiliate_id: int, actor_id: str
    ) -> tuple[Affiliate, bool]:
        actor = require_actor(actor_id)
        affiliate = await self.get_by_id(affiliate_id)

        if affiliate.status == AffiliateStatus.ACTIVE:
            return affiliate, False

        updated = await self.affiliate_repo.set_status(
            affiliate_id,
            AffiliateStatus.ACTIVE,
            allowed_from=(
                AffiliateStatus.PENDING,
                AffiliateStatus.SUSPENDED,
                AffiliateStatus.REJECTED,
            ),
            approved_at=utc_now(),
            updated_by=actor,
        )

        affiliate = await self.get_by_id(affiliate_id)
        if not updated:
            # Concurrent approver got there first
            return affiliate, False

        self.logger.info(
            "Affiliate approved",
            extra={"affiliate_id": affiliate_id, "actor_id": actor},
        )
        return affiliate, True

    @transaction
    async def suspend_affiliate(
        self, affiliate_id: int, actor_id: str, reason: str | None = None
    ) -> Affiliate:
        """
        Suspend affiliate from any status. Idempotent.

        Args:
            affiliate_id: Affiliate ID
            actor_id: Suspending admin
            reason: Optional reason (logged)

        Returns:
            Suspended affiliate
        """
        actor = require_actor(actor_id)

        updated = await self.affiliate_repo.set_status(
            affiliate_id, AffiliateStatus.SUSPENDED, updated_by=actor
        )
        if not updated:
            raise NotFound(f"Affiliate {affiliate_id} not found")

        self.logger.warning(
            "Affiliate suspended",
            extra={
                "affiliate_id": affiliate_id,
                "actor_id": actor,
                "reason": reason,
            },
        )
        return await self.get_by_id(affiliate_id)

    @transaction
    async def reject_affiliate(
        self, affiliate_id: int, actor_id: str
    ) -> Affiliate:
        """Reject pending affiliate application."""
        actor = require_actor(actor_id)

        updated = await self.affiliate_repo.set_status(
            affiliate_id,
            AffiliateStatus.REJECTED,
            allowed_from=(AffiliateStatus.PENDING,),
            updated_by=actor,
        )
        await self.ensure_transitioned(
            updated, self.affiliate_repo, affiliate_id, "Affiliate"
        )

        self.logger.info(
            "Affiliate rejected",
            extra={"affiliate_id": affiliate_id, "actor_id": actor},
        )
        return await self.get_by_id(affiliate_id)

    @transaction
    async def update_commission_rate(
        self,
        affiliate_id: int,
        rate: Decimal | int | str | float,
        actor_id: str,
    ) -> Affiliate:
        """
        Change affiliate commission rate.

        Existing commissions keep their snapshot rate.

        Raises:
            InvalidArgument: If rate is outside [0, 1], has more than four
                decimal places, or actor is missing
            NotFound: If affiliate does not exist
        """
        actor = require_actor(actor_id)
        new_rate = validate_commission_rate(rate)

        updated = await self.affiliate_repo.update_where(
            affiliate_id, commission_rate=new_rate, updated_by=actor
        )
        if not updated:
            raise NotFound(f"Affiliate {affiliate_id} not found")

        self.logger.info(
            "Commission rate updated",
            extra={
                "affiliate_id": affiliate_id,
                "rate": str(new_rate),
                "actor_id": actor,
            },
        )
        return await self.get_by_id(affiliate_id)

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    @transaction
    async def generate_link(
        self, affiliate_id: int, request: LinkRequest | dict[str, Any]
    ) -> AffiliateLink:
        """
        Create tracked link for an active affiliate.

        Raises:
            NotFound: If affiliate does not exist
            InvalidArgument: If affiliate is not active or request is invalid
        """
        if not isinstance(request, LinkRequest):
            try:
                request = LinkRequest.model_validate(request)
            except ValidationError as e:
                raise invalid_argument_from(e) from e

        affiliate = await self.get_by_id(affiliate_id)
        if not affiliate.is_active:
            raise InvalidArgument("Affiliate account is not active")

        link = await self.link_repo.create(
            affiliate_id=affiliate_id,
            **request.model_dump(),
        )

        self.logger.info(
            "Affiliate link generated",
            extra={
                "affiliate_id": affiliate_id,
                "link_id": link.id,
                "link_type": link.link_type,
            },
        )
        return link

    async def list_links(self, affiliate_id: int) -> list[AffiliateLink]:
        """List tracked links of affiliate."""
        return await self.link_repo.list_by_affiliate(affiliate_id)

    @transaction
    async def set_link_active(
        self, link_id: int, is_active: bool, actor_id: str
    ) -> AffiliateLink:
        """Enable or disable tracked link. Link type is immutable."""
        require_actor(actor_id)

        updated = await self.link_repo.update_where(
            link_id, is_active=is_active
        )
        if not updated:
            raise NotFound(f"Affiliate link {link_id} not found")

        link = await self.link_repo.get_by_id(link_id)
        return link

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    async def get_affiliate_stats(
        self,
        affiliate_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> dict[str, Any]:
        """
        Get click, conversion and commission figures for one affiliate.

        Args:
            affiliate_id: Affiliate ID
            start: Optional inclusive period start
            end: Optional inclusive period end

        Returns:
            Dict with clicks, conversions, conversion_rate (percent) and
            per-status commission counts and amounts
        """
        await self.get_by_id(affiliate_id)

        clicks, conversions = await self.session_repo.get_conversion_counts(
            affiliate_id, start, end
        )
        commission_stats = await self.commission_repo.get_stats(
            affiliate_id, start, end
        )

        return {
            "affiliate_id": affiliate_id,
            "clicks": clicks,
            "conversions": conversions,
            "conversion_rate": conversion_rate_percent(clicks, conversions),
            **commission_stats,
        }

    async def get_program_stats(self) -> dict[str, int | Decimal]:
        """Get program-wide affiliate counts and lifetime totals."""
        return await self.affiliate_repo.get_program_stats()

