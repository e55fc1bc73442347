"""
Payout service.

Batches approved commissions of one affiliate into a payout and settles
the batch atomically: a payout is completed together with every linked
commission or not at all.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.models.enums import PayoutStatus
from affiliate_ledger.models.payout import Payout
from affiliate_ledger.repositories.affiliate_repository import (
    AffiliateRepository,
)
from affiliate_ledger.repositories.commission_repository import (
    CommissionRepository,
)
from affiliate_ledger.repositories.payout_repository import PayoutRepository
from affiliate_ledger.services.base_service import BaseService, transaction
from affiliate_ledger.services.notification import LedgerNotifier
from affiliate_ledger.services.notification.templates import (
    payout_completed_email,
)
from affiliate_ledger.utils.datetime_utils import utc_now
from affiliate_ledger.utils.exceptions import (
    ConflictAlready,
    InvalidArgument,
    NotFound,
)
from affiliate_ledger.utils.validation import require_actor, validate_ids


class PayoutService(BaseService):
    """Payout batcher."""

    def __init__(
        self,
        session: AsyncSession,
        notifier: LedgerNotifier | None = None,
    ) -> None:
        """Initialize payout service."""
        super().__init__(session)
        self.payout_repo = PayoutRepository(session)
        self.commission_repo = CommissionRepository(session)
        self.affiliate_repo = AffiliateRepository(session)
        self.notifier = notifier

    @transaction
    async def create_payout(
        self,
        affiliate_id: int,
        commission_ids: list[int],
        payout_method: str,
        actor_id: str,
    ) -> Payout:
        """
        Create pending payout covering exactly the given commissions.

        Every ID must be an approved commission of the affiliate that is not
        already part of a pending or processing payout. Otherwise nothing
        is written.

        Args:
            affiliate_id: Paid affiliate
            commission_ids: Commissions to settle
            payout_method: Settlement method
            actor_id: Admin creating the payout

        Returns:
            Created payout

        Raises:
            InvalidArgument: If the batch is empty, has duplicates, or any
                commission is not eligible
        """
        actor = require_actor(actor_id)
        ids = validate_ids(commission_ids, "Commission IDs")
        if len(set(ids)) != len(ids):
            raise InvalidArgument("Commission IDs must be unique")

        commissions = await self.commission_repo.find_batchable(
            affiliate_id, ids
        )
        if len(commissions) != len(ids):
            raise InvalidArgument(
                "Some commissions are not valid or not approved"
            )

        total_amount = sum(
            (c.commission_amount for c in commissions), Decimal("0")
        )

        payout = await self.payout_repo.create(
            affiliate_id=affiliate_id,
            total_amount=total_amount,
            commission_count=len(commissions),
            payout_method=payout_method,
            status=PayoutStatus.PENDING,
            processed_by=actor,
        )
        await self.payout_repo.link_commissions(payout.id, ids)

        self.logger.info(
            "Payout created",
            extra={
                "payout_id": payout.id,
                "affiliate_id": affiliate_id,
                "commission_count": len(commissions),
                "total_amount": str(total_amount),
                "actor_id": actor,
            },
        )
        return payout

    async def process_payout(
        self,
        payout_id: int,
        payment_reference: str,
        actor_id: str,
        notes: str | None = None,
    ) -> Payout:
        """
        Complete payout and mark every linked commission paid.

        Both updates happen in one transaction. If any linked commission is
        no longer approved the whole operation rolls back.

        Args:
            payout_id: Payout ID
            payment_reference: External payment reference
            actor_id: Admin settling the payout
            notes: Optional notes

        Returns:
            Completed payout

        Raises:
            NotFound: If payout does not exist
            ConflictAlready: If payout is not open or a linked commission
                is not approved
        """
        payout = await self._complete(
            payout_id, payment_reference, actor_id, notes
        )
        return await self._after_completion(payout)

    @transaction
    async def _complete(
        self,
        payout_id: int,
        payment_reference: str,
        actor_id: str,
        notes: str | None,
    ) -> Payout:
        actor = require_actor(actor_id)
        if not payment_reference or not str(payment_reference).strip():
            raise InvalidArgument("Payment reference is required")

        payout = await self.get_payout(payout_id)
        linked_ids = await self.payout_repo.get_commission_ids(payout_id)
        processed_at = utc_now()

        updated = await self.payout_repo.transition(
            payout_id,
            PayoutStatus.OPEN,
            PayoutStatus.COMPLETED,
            processed_at=processed_at,
            processed_by=actor,
            payment_reference=payment_reference,
            notes=notes,
        )
        await self.ensure_transitioned(
            updated, self.payout_repo, payout_id, "Payout"
        )

        paid = await self.commission_repo.mark_paid_for_payout(
            payout_id,
            processed_at,
            payout.payout_method,
            payment_reference,
            actor,
        )
        if paid != len(linked_ids):
            raise ConflictAlready(
                f"Payout {payout_id}: {len(linked_ids) - paid} linked "
                f"commission(s) are no longer approved"
            )

        self.logger.info(
            "Payout processed",
            extra={
                "payout_id": payout_id,
                "commission_count": paid,
                "payment_reference": payment_reference,
                "actor_id": actor,
            },
        )
        return await self.get_payout(payout_id)

    async def _after_completion(self, payout: Payout) -> Payout:
        """Move affiliate totals from pending to paid and email the affiliate."""
        payout_id = payout.id
        try:
            await self.affiliate_repo.add_to_aggregates(
                payout.affiliate_id,
                pending_commissions=-payout.total_amount,
                paid_commissions=payout.total_amount,
            )
            await self.commit()
            affiliate = await self.affiliate_repo.get_by_id(payout.affiliate_id)
        except Exception as e:
            await self.rollback()
            self.logger.warning(
                "Failed to update affiliate totals after payout",
                extra={"payout_id": payout_id, "error": str(e)},
            )
            # Rollback expired every loaded row
            return await self.get_payout(payout_id)

        if affiliate and self.notifier:
            subject, html, text = payout_completed_email(affiliate, payout)
            self.notifier.send_email(affiliate.email, subject, html, text)
        return payout

    @transaction
    async def mark_payout_processing(
        self, payout_id: int, actor_id: str
    ) -> Payout:
        """Move pending payout to processing."""
        actor = require_actor(actor_id)

        updated = await self.payout_repo.transition(
            payout_id,
            (PayoutStatus.PENDING,),
            PayoutStatus.PROCESSING,
            processed_by=actor,
        )
        await self.ensure_transitioned(
            updated, self.payout_repo, payout_id, "Payout"
        )
        return await self.get_payout(payout_id)

    @transaction
    async def mark_payout_failed(
        self, payout_id: int, actor_id: str, notes: str | None = None
    ) -> Payout:
        """
        Mark open payout as failed.

        Linked commissions stay approved and can be batched again.
        """
        actor = require_actor(actor_id)

        updated = await self.payout_repo.transition(
            payout_id,
            PayoutStatus.OPEN,
            PayoutStatus.FAILED,
            processed_at=utc_now(),
            processed_by=actor,
            notes=notes,
        )
        await self.ensure_transitioned(
            updated, self.payout_repo, payout_id, "Payout"
        )

        self.logger.warning(
            "Payout failed",
            extra={"payout_id": payout_id, "actor_id": actor, "notes": notes},
        )
        return await self.get_payout(payout_id)

    async def get_payout(self, payout_id: int) -> Payout:
        """Get payout by ID or raise NotFound."""
        payout = await self.payout_repo.get_by_id(payout_id)
        if not payout:
            raise NotFound(f"Payout {payout_id} not found")
        return payout

    async def list_payouts(
        self, affiliate_id: int | None = None
    ) -> list[Payout]:
        """List payouts, newest first."""
        return await self.payout_repo.list_payouts(affiliate_id)

    async def get_payout_commission_ids(self, payout_id: int) -> list[int]:
        """Get IDs of commissions covered by payout."""
        await self.get_payout(payout_id)
        return await self.payout_repo.get_commission_ids(payout_id)

    async def get_payout_stats(self) -> dict[str, int | Decimal]:
        """Payout counts and amounts per status."""
        return await self.payout_repo.get_stats()
