"""
Unit tests for refund handling.

Tests cover:
- In-place reduction of pending/approved commissions
- Compensating entries for paid commissions
- No-op cases (no commission, closed status, fully refunded)
- Input validation
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from affiliate_ledger.models.enums import CommissionStatus
from affiliate_ledger.utils.exceptions import ConflictAlready, InvalidArgument


class TestInPlaceAdjustment:
    """Refunds of unpaid commissions shrink the original row."""

    @pytest.mark.parametrize(
        "status", [CommissionStatus.PENDING, CommissionStatus.APPROVED]
    )
    @pytest.mark.asyncio
    async def test_partial_refund(self, refund_service, make_commission, status):
        """1000 at 10% refunded by 250 becomes 750 / 75."""
        original = make_commission(status=status)
        adjusted = make_commission(status=status, order_total="750", amount="75")
        refund_service.commission_repo.get_original_for_order = AsyncMock(
            return_value=original
        )
        refund_service.commission_repo.adjust_in_place = AsyncMock(return_value=1)
        refund_service.commission_service.get_commission = AsyncMock(
            return_value=adjusted
        )

        result = await refund_service.handle_refund(500, Decimal("250"), "admin-1")

        assert result is adjusted
        refund_service.commission_repo.adjust_in_place.assert_awaited_once_with(
            original, Decimal("750"), Decimal("75"), "admin-1"
        )
        refund_service.commission_service.create_commission.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_full_refund(self, refund_service, make_commission):
        """Refunding the whole order zeroes the commission."""
        original = make_commission()
        refund_service.commission_repo.get_original_for_order = AsyncMock(
            return_value=original
        )
        refund_service.commission_repo.adjust_in_place = AsyncMock(return_value=1)

        await refund_service.handle_refund(500, "1000", "admin-1")

        args, _ = refund_service.commission_repo.adjust_in_place.await_args
        assert args[1] == Decimal("0")
        assert args[2] == Decimal("0")

    @pytest.mark.asyncio
    async def test_concurrent_change(
        self, refund_service, make_commission, mock_session
    ):
        """Zero-row adjustment is a conflict and rolls back."""
        refund_service.commission_repo.get_original_for_order = AsyncMock(
            return_value=make_commission()
        )
        refund_service.commission_repo.adjust_in_place = AsyncMock(return_value=0)

        with pytest.raises(ConflictAlready):
            await refund_service.handle_refund(500, "100", "admin-1")

        mock_session.rollback.assert_awaited_once()


class TestCompensatingEntry:
    """Refunds of paid commissions append a negative entry."""

    @pytest.mark.asyncio
    async def test_paid_refund_appends_entry(self, refund_service, make_commission):
        """Paid commission stays untouched; compensation is approved."""
        original = make_commission(status=CommissionStatus.PAID)
        compensating = make_commission(
            id=11,
            status=CommissionStatus.APPROVED,
            order_total="-500",
            amount="-50",
        )
        refund_service.commission_repo.get_original_for_order = AsyncMock(
            return_value=original
        )
        refund_service.commission_service.create_commission = AsyncMock(
            return_value=compensating
        )

        result = await refund_service.handle_refund(500, "500", "admin-1")

        assert result is compensating
        refund_service.commission_service.create_commission.assert_awaited_once_with(
            affiliate_id=1,
            order_id=500,
            order_total=Decimal("-500"),
            commission_rate=Decimal("0.10"),
            click_id=7,
            status=CommissionStatus.APPROVED,
            adjusts_commission_id=10,
            actor_id="admin-1",
        )
        refund_service.commission_repo.adjust_in_place.assert_not_awaited()


class TestRefundNoOps:
    """Refunds that leave the ledger unchanged."""

    @pytest.mark.asyncio
    async def test_order_without_commission(self, refund_service):
        """Orders never attributed are ignored."""
        refund_service.commission_repo.get_original_for_order = AsyncMock(
            return_value=None
        )

        assert await refund_service.handle_refund(500, "10", "admin-1") is None

    @pytest.mark.parametrize(
        "status", [CommissionStatus.CANCELLED, CommissionStatus.DISPUTED]
    )
    @pytest.mark.asyncio
    async def test_closed_commission(self, refund_service, make_commission, status):
        """Cancelled and disputed commissions are not adjusted."""
        refund_service.commission_repo.get_original_for_order = AsyncMock(
            return_value=make_commission(status=status)
        )

        assert await refund_service.handle_refund(500, "10", "admin-1") is None
        refund_service.commission_repo.adjust_in_place.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_already_fully_refunded(self, refund_service, make_commission):
        """Zero order total means nothing is left to refund."""
        refund_service.commission_repo.get_original_for_order = AsyncMock(
            return_value=make_commission(order_total="0", amount="0")
        )

        assert await refund_service.handle_refund(500, "10", "admin-1") is None


class TestRefundValidation:
    """Refund input validation."""

    @pytest.mark.parametrize("amount", ["0", "-1"])
    @pytest.mark.asyncio
    async def test_non_positive_refund(self, refund_service, amount):
        """Refund amount must be positive."""
        with pytest.raises(InvalidArgument):
            await refund_service.handle_refund(500, amount, "admin-1")

    @pytest.mark.asyncio
    async def test_refund_exceeds_order_total(self, refund_service, make_commission):
        """Refund larger than the attributed total is rejected."""
        refund_service.commission_repo.get_original_for_order = AsyncMock(
            return_value=make_commission()
        )

        with pytest.raises(InvalidArgument, match="exceeds"):
            await refund_service.handle_refund(500, "1000.01", "admin-1")

    @pytest.mark.asyncio
    async def test_refund_requires_actor(self, refund_service):
        """Actor is mandatory."""
        with pytest.raises(InvalidArgument):
            await refund_service.handle_refund(500, "10", None)
