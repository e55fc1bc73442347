"""
Notification package.

Best-effort admin alerts and affiliate emails.
"""

from affiliate_ledger.services.notification.ledger_notifier import (
    LedgerNotifier,
)


__all__ = ["LedgerNotifier"]
