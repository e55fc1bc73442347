"""
Unit tests for notification delivery.

Tests cover:
- LedgerNotifier hand-off and failure isolation
- Message templates and formatters
- SMTP message building and the email task
"""

from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from affiliate_ledger.config.settings import Settings
from affiliate_ledger.services.notification import LedgerNotifier
from affiliate_ledger.services.notification.templates import (
    affiliate_approved_email,
    fraud_alert_message,
    payout_completed_email,
)
from affiliate_ledger.utils.formatters import (
    conversion_rate_percent,
    escape_md,
    format_money,
)


class TestLedgerNotifier:
    """Notifier never lets delivery problems escape."""

    def test_notify_hands_off(self, notifier, enqueue_message):
        """Admin message is passed to the queue."""
        assert notifier.notify("hello") is True
        enqueue_message.assert_called_once_with("hello")

    def test_send_email_hands_off(self, notifier, enqueue_email):
        """Email is passed to the queue with all parts."""
        assert notifier.send_email("a@example.com", "Hi", "<p>Hi</p>", "Hi") is True
        enqueue_email.assert_called_once_with(
            "a@example.com", "Hi", "<p>Hi</p>", "Hi"
        )

    @pytest.mark.parametrize("error", ["redis down", "redis said {nope}"])
    def test_notify_failure_swallowed(self, error):
        """Broker outage returns False instead of raising."""
        notifier = LedgerNotifier(
            enqueue_message=MagicMock(side_effect=ConnectionError(error))
        )

        assert notifier.notify("hello") is False

    @pytest.mark.parametrize("error", ["redis down", "redis said {nope}"])
    def test_email_failure_swallowed(self, error):
        """Email enqueue failure returns False instead of raising."""
        notifier = LedgerNotifier(
            enqueue_email=MagicMock(side_effect=ConnectionError(error))
        )

        assert notifier.send_email("a@example.com", "Hi", "<p>Hi</p>") is False


class TestTemplates:
    """Test notification templates."""

    def test_approved_email(self, mock_affiliate):
        """Approval email carries code and rate in percent."""
        subject, html, text = affiliate_approved_email(mock_affiliate)

        assert "approved" in subject
        assert "AB23CD45" in html
        assert "AB23CD45" in text
        assert "10.00%" in text

    def test_payout_email(self, mock_affiliate):
        """Payout email carries ID, amount and reference."""
        payout = MagicMock()
        payout.id = 3
        payout.total_amount = Decimal("1234.5")
        payout.commission_count = 2
        payout.payment_reference = "TX-9"

        subject, html, text = payout_completed_email(mock_affiliate, payout)

        assert subject == "Payout #3 completed"
        assert "1,234.50" in text
        assert "TX-9" in html

    def test_fraud_alert(self):
        """Fraud alert lists reasons and suspension."""
        message = fraud_alert_message(1, 500, 80, ["self_referral"], True)

        assert "Risk score: 80" in message
        assert "Order ID: 500" in message
        assert "suspended" in message

    def test_fraud_alert_without_order(self):
        """Missing order is rendered as a dash."""
        message = fraud_alert_message(1, None, 50, [], False)

        assert "Order ID: -" in message
        assert "suspended" not in message


class TestFormatters:
    """Test formatting helpers."""

    def test_format_money(self):
        """Two decimals, thousands separator, half up."""
        assert format_money(Decimal("1234567.005")) == "1,234,567.01"

    def test_conversion_rate(self):
        """Conversion rate in percent with two decimals."""
        assert conversion_rate_percent(3, 1) == Decimal("33.33")
        assert conversion_rate_percent(4, 4) == Decimal("100.00")

    def test_conversion_rate_without_clicks(self):
        """No clicks means 0%, not a division error."""
        assert conversion_rate_percent(0, 0) == Decimal("0")

    def test_escape_md(self):
        """Markdown control characters are escaped."""
        assert escape_md("a_b*c") == "a\\_b\\*c"
        assert escape_md(None) == ""


@pytest.fixture
def smtp_settings():
    """Settings with SMTP configured."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_user="ledger@example.com",
        smtp_password="secret",
        smtp_from_name="Partners",
    )


class TestEmailTask:
    """Test SMTP email task body."""

    def test_build_message(self, smtp_settings):
        """Multipart message with text and html parts."""
        from jobs.tasks.ledger_notifications import build_message

        msg = build_message(
            smtp_settings, "a@example.com", "Hi", "<p>Hi</p>", "Hi"
        )

        assert msg["To"] == "a@example.com"
        assert msg["From"] == "Partners <ledger@example.com>"
        assert [part.get_content_subtype() for part in msg.get_payload()] == [
            "plain",
            "html",
        ]

    def test_send_email_over_smtp(self, smtp_settings):
        """Task logs in and sends through SMTP with STARTTLS."""
        from jobs.tasks import ledger_notifications

        with patch.object(
            ledger_notifications, "get_settings", return_value=smtp_settings
        ), patch.object(ledger_notifications.smtplib, "SMTP") as smtp_cls:
            ledger_notifications.send_email.fn(
                "a@example.com", "Hi", "<p>Hi</p>"
            )

        server = smtp_cls.return_value.__enter__.return_value
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("ledger@example.com", "secret")
        assert server.sendmail.call_args.args[:2] == (
            "ledger@example.com",
            "a@example.com",
        )

    def test_send_email_not_configured(self):
        """Without SMTP credentials the task does nothing."""
        from jobs.tasks import ledger_notifications

        settings = Settings(database_url="sqlite+aiosqlite:///:memory:")
        with patch.object(
            ledger_notifications, "get_settings", return_value=settings
        ), patch.object(ledger_notifications.smtplib, "SMTP") as smtp_cls:
            ledger_notifications.send_email.fn(
                "a@example.com", "Hi", "<p>Hi</p>"
            )

        smtp_cls.assert_not_called()
