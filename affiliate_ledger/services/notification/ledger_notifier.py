"""
Ledger notifier.

Fire-and-forget delivery of admin alerts and affiliate emails. Messages are
enqueued as dramatiq tasks; any enqueue failure is logged and swallowed so
notifications never affect ledger state.
"""

from collections.abc import Callable
from typing import Any

from loguru import logger


def _enqueue_admin_message(message: str) -> None:
    from jobs.tasks.ledger_notifications import send_admin_message

    send_admin_message.send(message)


def _enqueue_email(
    to: str, subject: str, html: str, text: str | None
) -> None:
    from jobs.tasks.ledger_notifications import send_email

    send_email.send(to, subject, html, text)


class LedgerNotifier:
    """
    Best-effort notification sender.

    Args:
        enqueue_message: Callable taking the admin message text
        enqueue_email: Callable taking (to, subject, html, text)
    """

    def __init__(
        self,
        enqueue_message: Callable[[str], Any] | None = None,
        enqueue_email: Callable[[str, str, str, str | None], Any] | None = None,
    ) -> None:
        self._enqueue_message = enqueue_message or _enqueue_admin_message
        self._enqueue_email = enqueue_email or _enqueue_email

    def notify(self, message: str) -> bool:
        """
        Send alert to administrators.

        Returns:
            True if the message was handed off, False otherwise
        """
        try:
            self._enqueue_message(message)
            return True
        except Exception as e:
            logger.warning(
                "Failed to enqueue admin notification",
                extra={"message_length": len(message), "error": str(e)},
            )
            return False

    def send_email(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
    ) -> bool:
        """
        Send email to a single recipient.

        Returns:
            True if the email was handed off, False otherwise
        """
        try:
            self._enqueue_email(to, subject, html, text)
            return True
        except Exception as e:
            logger.warning(
                "Failed to enqueue email",
                extra={"to": to, "subject": subject, "error": str(e)},
            )
            return False
