"""
Integration tests for fraud screening.

Signals are computed from real click, order and commission rows.
"""

import pytest

from affiliate_ledger.config.business_constants import FRAUD_DETECTION_ACTOR
from affiliate_ledger.models.enums import (
    AffiliateStatus,
    CommissionStatus,
    RiskLevel,
)
from affiliate_ledger.utils.exceptions import InvalidReferral


@pytest.mark.asyncio
async def test_self_referral_is_suspicious(ledger, active_affiliate, create_order):
    """Customer using the affiliate's own email scores 50 and is disputed."""
    affiliate_id = active_affiliate.id
    token = await ledger.track_click(active_affiliate.affiliate_code)
    for _ in range(2):
        await ledger.track_click(active_affiliate.affiliate_code)
    order = await create_order("300", customer_email="Partner@Example.com")
    commission = await ledger.attribute_conversion(token, order.id)

    result = await ledger.fraud.screen_order(
        order.id, affiliate_id, order.customer_email
    )

    assert result.reasons == ["self_referral"]
    assert result.risk_score == 50
    assert result.is_suspicious is True

    disputed = await ledger.commissions.get_commission(commission.id)
    assert disputed.status == CommissionStatus.DISPUTED
    assert disputed.updated_by == FRAUD_DETECTION_ACTOR

    affiliate = await ledger.affiliates.get_by_id(affiliate_id)
    assert affiliate.status == AffiliateStatus.ACTIVE


@pytest.mark.asyncio
async def test_high_risk_suspends_affiliate(
    ledger, active_affiliate, create_order, enqueue_message
):
    """Self-referral plus click flooding scores 80 and suspends."""
    affiliate_id = active_affiliate.id
    code = active_affiliate.affiliate_code
    tokens = [
        await ledger.track_click(code, {"ip_address": "203.0.113.9"})
        for _ in range(11)
    ]
    order = await create_order("400", customer_email="partner@example.com")
    commission = await ledger.attribute_conversion(tokens[0], order.id)

    result = await ledger.fraud.screen_order(
        order.id, affiliate_id, "partner@example.com", "203.0.113.9"
    )

    assert result.reasons == ["self_referral", "click_flooding"]
    assert result.risk_score == 80

    affiliate = await ledger.affiliates.get_by_id(affiliate_id)
    assert affiliate.status == AffiliateStatus.SUSPENDED

    disputed = await ledger.commissions.get_commission(commission.id)
    assert disputed.status == CommissionStatus.DISPUTED

    logs = await ledger.fraud.fraud_log_repo.list_by_affiliate(affiliate_id)
    assert len(logs) == 1
    assert logs[0].risk_score == 80
    assert logs[0].reasons == ["self_referral", "click_flooding"]

    profile = await ledger.fraud.get_risk_profile(affiliate_id)
    assert profile.risk_level == RiskLevel.HIGH
    assert profile.total_flags == 1
    assert profile.recent_flags == 1
    assert profile.average_risk_score == 80.0

    enqueue_message.assert_called_once()

    with pytest.raises(InvalidReferral):
        await ledger.track_click(code)


@pytest.mark.asyncio
async def test_abnormal_conversion_rate_alone(
    ledger, active_affiliate, create_order
):
    """Converting every click scores 25 and is not acted upon."""
    affiliate_id = active_affiliate.id
    token = await ledger.track_click(active_affiliate.affiliate_code)
    order = await create_order("120")
    commission = await ledger.attribute_conversion(token, order.id)

    result = await ledger.fraud.screen_order(
        order.id, affiliate_id, "buyer@example.com"
    )

    assert result.reasons == ["abnormal_conversion_rate"]
    assert result.risk_score == 25
    assert result.is_suspicious is False

    untouched = await ledger.commissions.get_commission(commission.id)
    assert untouched.status == CommissionStatus.PENDING
    assert await ledger.fraud.fraud_log_repo.list_by_affiliate(affiliate_id) == []


@pytest.mark.asyncio
async def test_new_affiliate_high_value_order(ledger, active_affiliate, create_order):
    """Fresh affiliate with an order above 5000 scores 15."""
    order = await create_order("7500")

    result = await ledger.evaluate_fraud(
        order.id, active_affiliate.id, "buyer@example.com"
    )

    assert result.reasons == ["new_affiliate_high_value"]
    assert result.risk_score == 15


@pytest.mark.asyncio
async def test_unknown_affiliate_scores_zero(ledger):
    """Evaluation of a missing affiliate is clean."""
    result = await ledger.evaluate_fraud(None, 404, "someone@example.com")

    assert result.is_suspicious is False
    assert result.risk_score == 0
    assert result.reasons == []


@pytest.mark.asyncio
async def test_risk_profile_without_history(ledger, active_affiliate):
    """Affiliates never flagged are low risk."""
    profile = await ledger.fraud.get_risk_profile(active_affiliate.id)

    assert profile.risk_level == RiskLevel.LOW
    assert profile.total_flags == 0
    assert profile.average_risk_score == 0.0
