"""
Formatters utility.

Formatting helpers for reports and notification texts.
"""

from decimal import ROUND_HALF_UP, Decimal


def format_money(amount: Decimal) -> str:
    """
    Format amount with two decimals and thousands separator.

    Examples:
        >>> format_money(Decimal("1234.5"))
        '1,234.50'
    """
    return f"{amount.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):,}"


def conversion_rate_percent(clicks: int, conversions: int) -> Decimal:
    """Conversion rate in percent, two decimals; 0 without clicks."""
    if not clicks:
        return Decimal("0.00")
    rate = Decimal(conversions) * 100 / Decimal(clicks)
    return rate.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def escape_md(text: str | None) -> str:
    """
    Escape special characters for Markdown V1.

    Escapes: _ * ` [
    """
    if not text:
        return ""
    return (
        str(text)
        .replace("_", "\\_")
        .replace("*", "\\*")
        .replace("`", "\\`")
        .replace("[", "\\[")
    )
