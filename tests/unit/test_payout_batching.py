"""
Unit tests for payout batching and settlement.

Tests cover:
- Batch validation (approved, owned, not already batched, unique)
- Total amount calculation
- Atomic completion cascade
- Post-commit notification
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from affiliate_ledger.models.enums import CommissionStatus, PayoutStatus
from affiliate_ledger.utils.exceptions import (
    ConflictAlready,
    InvalidArgument,
    NotFound,
)


@pytest.fixture
def mock_payout():
    """Pending payout for affiliate 1 covering two commissions."""
    payout = MagicMock()
    payout.id = 3
    payout.affiliate_id = 1
    payout.status = PayoutStatus.PENDING
    payout.total_amount = Decimal("150")
    payout.commission_count = 2
    payout.payout_method = "bank_transfer"
    payout.payment_reference = "TX-9"
    return payout


class TestCreatePayout:
    """Test payout creation."""

    @pytest.mark.asyncio
    async def test_creates_payout_with_total(
        self, payout_service, make_commission, mock_payout, mock_session
    ):
        """Total is the sum of batched commission amounts."""
        commissions = [
            make_commission(id=10, status=CommissionStatus.APPROVED, amount="100"),
            make_commission(id=11, status=CommissionStatus.APPROVED, amount="50"),
        ]
        payout_service.commission_repo.find_batchable = AsyncMock(
            return_value=commissions
        )
        payout_service.payout_repo.create = AsyncMock(return_value=mock_payout)

        payout = await payout_service.create_payout(
            1, [10, 11], "bank_transfer", "admin-1"
        )

        assert payout is mock_payout
        payout_service.payout_repo.create.assert_awaited_once_with(
            affiliate_id=1,
            total_amount=Decimal("150"),
            commission_count=2,
            payout_method="bank_transfer",
            status=PayoutStatus.PENDING,
            processed_by="admin-1",
        )
        payout_service.payout_repo.link_commissions.assert_awaited_once_with(
            3, [10, 11]
        )
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_ineligible_commission_rejected(
        self, payout_service, make_commission, mock_session
    ):
        """If any ID is not batchable nothing is written."""
        payout_service.commission_repo.find_batchable = AsyncMock(
            return_value=[make_commission(id=10, status=CommissionStatus.APPROVED)]
        )

        with pytest.raises(InvalidArgument, match="not valid or not approved"):
            await payout_service.create_payout(
                1, [10, 11], "bank_transfer", "admin-1"
            )

        payout_service.payout_repo.create.assert_not_awaited()
        mock_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_empty_batch(self, payout_service):
        """Empty batch is rejected."""
        with pytest.raises(InvalidArgument):
            await payout_service.create_payout(1, [], "bank_transfer", "admin-1")

    @pytest.mark.asyncio
    async def test_duplicate_ids(self, payout_service):
        """Duplicate IDs are rejected before querying."""
        with pytest.raises(InvalidArgument, match="unique"):
            await payout_service.create_payout(
                1, [10, 10], "bank_transfer", "admin-1"
            )

        payout_service.commission_repo.find_batchable.assert_not_awaited()


class TestProcessPayout:
    """Test payout completion."""

    @pytest.mark.asyncio
    async def test_completes_and_cascades(
        self,
        payout_service,
        mock_payout,
        mock_affiliate,
        mock_session,
        enqueue_email,
    ):
        """Payout completes, commissions are paid, affiliate is emailed."""
        mock_payout.status = PayoutStatus.COMPLETED
        payout_service.payout_repo.get_by_id = AsyncMock(return_value=mock_payout)
        payout_service.payout_repo.get_commission_ids = AsyncMock(
            return_value=[10, 11]
        )
        payout_service.payout_repo.transition = AsyncMock(return_value=1)
        payout_service.commission_repo.mark_paid_for_payout = AsyncMock(
            return_value=2
        )
        payout_service.affiliate_repo.get_by_id = AsyncMock(
            return_value=mock_affiliate
        )

        payout = await payout_service.process_payout(3, "TX-9", "admin-1")

        assert payout.status == PayoutStatus.COMPLETED
        args, kwargs = payout_service.payout_repo.transition.await_args
        assert args == (3, PayoutStatus.OPEN, PayoutStatus.COMPLETED)
        assert kwargs["payment_reference"] == "TX-9"
        assert kwargs["processed_by"] == "admin-1"
        payout_service.affiliate_repo.add_to_aggregates.assert_awaited_once_with(
            1,
            pending_commissions=Decimal("-150"),
            paid_commissions=Decimal("150"),
        )
        enqueue_email.assert_called_once()
        assert enqueue_email.call_args.args[0] == "partner@example.com"
        mock_session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cascade_mismatch_rolls_back(
        self, payout_service, mock_payout, mock_session, enqueue_email
    ):
        """A linked commission no longer approved aborts the whole payout."""
        payout_service.payout_repo.get_by_id = AsyncMock(return_value=mock_payout)
        payout_service.payout_repo.get_commission_ids = AsyncMock(
            return_value=[10, 11]
        )
        payout_service.payout_repo.transition = AsyncMock(return_value=1)
        payout_service.commission_repo.mark_paid_for_payout = AsyncMock(
            return_value=1
        )

        with pytest.raises(ConflictAlready, match="no longer approved"):
            await payout_service.process_payout(3, "TX-9", "admin-1")

        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_awaited()
        payout_service.affiliate_repo.add_to_aggregates.assert_not_awaited()
        enqueue_email.assert_not_called()

    @pytest.mark.asyncio
    async def test_already_completed(self, payout_service, mock_payout):
        """Completed payout cannot be processed again."""
        mock_payout.status = PayoutStatus.COMPLETED
        payout_service.payout_repo.get_by_id = AsyncMock(return_value=mock_payout)
        payout_service.payout_repo.get_commission_ids = AsyncMock(
            return_value=[10, 11]
        )
        payout_service.payout_repo.transition = AsyncMock(return_value=0)

        with pytest.raises(ConflictAlready):
            await payout_service.process_payout(3, "TX-9", "admin-1")

        payout_service.commission_repo.mark_paid_for_payout.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_payout(self, payout_service):
        """Unknown payout is NotFound."""
        payout_service.payout_repo.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(NotFound):
            await payout_service.process_payout(404, "TX-9", "admin-1")

    @pytest.mark.asyncio
    async def test_reference_required(self, payout_service):
        """Payment reference is mandatory."""
        with pytest.raises(InvalidArgument):
            await payout_service.process_payout(3, " ", "admin-1")

    @pytest.mark.parametrize(
        "error", ["db gone", "check constraint {ck_paid_totals} violated"]
    )
    @pytest.mark.asyncio
    async def test_aggregate_failure_keeps_payout(
        self, payout_service, mock_payout, mock_session, enqueue_email, error
    ):
        """Failure after commit is logged, payout result is still returned."""
        payout_service.payout_repo.get_by_id = AsyncMock(return_value=mock_payout)
        payout_service.payout_repo.get_commission_ids = AsyncMock(
            return_value=[10, 11]
        )
        payout_service.payout_repo.transition = AsyncMock(return_value=1)
        payout_service.commission_repo.mark_paid_for_payout = AsyncMock(
            return_value=2
        )
        payout_service.affiliate_repo.add_to_aggregates = AsyncMock(
            side_effect=RuntimeError(error)
        )

        payout = await payout_service.process_payout(3, "TX-9", "admin-1")

        assert payout is mock_payout
        mock_session.rollback.assert_awaited_once()
        enqueue_email.assert_not_called()
