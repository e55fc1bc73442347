"""
Notification message templates.

Plain builders returning text (admin chat) or (subject, html, text) tuples
(email). No I/O.
"""

from affiliate_ledger.models.affiliate import Affiliate
from affiliate_ledger.models.payout import Payout
from affiliate_ledger.utils.formatters import escape_md, format_money


def affiliate_approved_email(affiliate: Affiliate) -> tuple[str, str, str]:
    """Build approval email for a newly activated affiliate."""
    rate_percent = format_money(affiliate.commission_rate * 100)
    subject = "Your affiliate application has been approved"
    text = (
        f"Hello {affiliate.business_name},\n\n"
        f"Your affiliate account is now active.\n"
        f"Referral code: {affiliate.affiliate_code}\n"
        f"Commission rate: {rate_percent}%\n"
    )
    html = f"""
    <html>
    <body>
        <h2>Welcome to the affiliate program</h2>
        <p>Hello {affiliate.business_name},</p>
        <p>Your affiliate account is now active.</p>
        <p><b>Referral code:</b> {affiliate.affiliate_code}<br>
        <b>Commission rate:</b> {rate_percent}%</p>
    </body>
    </html>
    """
    return subject, html, text


def payout_completed_email(
    affiliate: Affiliate, payout: Payout
) -> tuple[str, str, str]:
    """Build settlement email for a completed payout."""
    amount = format_money(payout.total_amount)
    subject = f"Payout #{payout.id} completed"
    text = (
        f"Hello {affiliate.business_name},\n\n"
        f"Payout #{payout.id} of {amount} covering "
        f"{payout.commission_count} commission(s) has been completed.\n"
        f"Payment reference: {payout.payment_reference}\n"
    )
    html = f"""
    <html>
    <body>
        <h2>Payout completed</h2>
        <p>Hello {affiliate.business_name},</p>
        <p>Payout <b>#{payout.id}</b> of <b>{amount}</b> covering
        {payout.commission_count} commission(s) has been completed.</p>
        <p>Payment reference: {payout.payment_reference}</p>
    </body>
    </html>
    """
    return subject, html, text


def fraud_alert_message(
    affiliate_id: int,
    order_id: int | None,
    risk_score: int,
    reasons: list[str],
    suspended: bool,
) -> str:
    """Build admin chat alert for a flagged order."""
    lines = [
        "🚨 *Affiliate fraud alert*",
        "",
        f"Affiliate ID: {affiliate_id}",
        f"Order ID: {order_id if order_id is not None else '-'}",
        f"Risk score: {risk_score}",
        f"Reasons: {escape_md(', '.join(reasons)) if reasons else '-'}",
    ]
    if suspended:
        lines.append("")
        lines.append("⛔ Affiliate automatically suspended")
    return "\n".join(lines)
