"""
Shared fixtures for unit tests.

This module provides common fixtures used across multiple test modules:
- Services wired to a mocked session with repositories replaced by mocks
- Mock affiliate and commission objects
"""

from datetime import timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from affiliate_ledger.models.enums import AffiliateStatus, CommissionStatus
from affiliate_ledger.services.commission_service import CommissionService
from affiliate_ledger.services.fraud_detection_service import (
    FraudDetectionService,
)
from affiliate_ledger.services.payout_service import PayoutService
from affiliate_ledger.services.refund_service import RefundService
from affiliate_ledger.utils.datetime_utils import utc_now


@pytest.fixture
def mock_affiliate():
    """
    Create mock affiliate with default values.

    Default values:
    - id: 1
    - email: partner@example.com
    - commission_rate: 0.10
    - created_at: 90 days ago (not a new affiliate)

    Returns:
        MagicMock: Mock affiliate object
    """
    affiliate = MagicMock()
    affiliate.id = 1
    affiliate.email = "partner@example.com"
    affiliate.business_name = "Partner Shop"
    affiliate.affiliate_code = "AB23CD45"
    affiliate.status = AffiliateStatus.ACTIVE
    affiliate.commission_rate = Decimal("0.10")
    affiliate.created_at = utc_now() - timedelta(days=90)
    return affiliate


@pytest.fixture
def make_commission():
    """
    Factory for mock commission rows.

    Returns:
        Callable building a MagicMock commission
    """
    def _make(
        id=10,
        status=CommissionStatus.PENDING,
        order_total="1000",
        rate="0.10",
        amount="100",
    ):
        commission = MagicMock()
        commission.id = id
        commission.affiliate_id = 1
        commission.order_id = 500
        commission.click_id = 7
        commission.status = status
        commission.order_total = Decimal(order_total)
        commission.commission_rate = Decimal(rate)
        commission.commission_amount = Decimal(amount)
        return commission

    return _make


@pytest.fixture
def commission_service(mock_session):
    """CommissionService with mocked repository."""
    service = CommissionService(mock_session)
    service.commission_repo = AsyncMock()
    return service


@pytest.fixture
def refund_service(mock_session):
    """RefundService with mocked repository and commission writer."""
    service = RefundService(mock_session)
    service.commission_repo = AsyncMock()
    service.commission_service = AsyncMock()
    return service


@pytest.fixture
def payout_service(mock_session, notifier):
    """PayoutService with mocked repositories."""
    service = PayoutService(mock_session, notifier)
    service.payout_repo = AsyncMock()
    service.commission_repo = AsyncMock()
    service.affiliate_repo = AsyncMock()
    return service


@pytest.fixture
def fraud_service(mock_session, notifier, mock_affiliate):
    """
    FraudDetectionService with quiet repositories.

    Defaults trigger no signal: no clicks, no recent orders, old affiliate.
    """
    service = FraudDetectionService(mock_session, notifier)
    service.affiliate_repo = AsyncMock()
    service.affiliate_repo.get_by_id = AsyncMock(return_value=mock_affiliate)
    service.session_repo = AsyncMock()
    service.session_repo.count_from_address = AsyncMock(return_value=0)
    service.session_repo.get_conversion_counts = AsyncMock(return_value=(0, 0))
    service.order_repo = AsyncMock()
    service.order_repo.count_recent_for_affiliate = AsyncMock(return_value=0)
    service.order_repo.get_by_id = AsyncMock(return_value=None)
    service.commission_repo = AsyncMock()
    service.fraud_log_repo = AsyncMock()
    return service
