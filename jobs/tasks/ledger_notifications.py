"""
Ledger notification tasks.

Deliver admin alerts to Telegram chats and affiliate emails over SMTP.
Enqueued by LedgerNotifier; the ledger never waits on delivery.
"""

import asyncio
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import dramatiq
from aiogram import Bot
from loguru import logger

from affiliate_ledger.config.operational_constants import (
    DRAMATIQ_TIME_LIMIT_SHORT,
    NOTIFICATION_MAX_RETRIES,
    SMTP_TIMEOUT,
    TELEGRAM_MESSAGE_DELAY,
    TELEGRAM_TIMEOUT,
)
from affiliate_ledger.config.settings import Settings, get_settings
from jobs.async_runner import run_async
from jobs.broker import broker  # noqa: F401


@dramatiq.actor(
    max_retries=NOTIFICATION_MAX_RETRIES, time_limit=DRAMATIQ_TIME_LIMIT_SHORT
)
def send_admin_message(message: str) -> None:
    """Send alert text to every configured admin chat."""
    settings = get_settings()

    if not settings.telegram_bot_token:
        logger.warning("Telegram bot token not configured, admin alert dropped")
        return

    admin_ids = settings.get_admin_ids()
    if not admin_ids:
        logger.warning("No admin IDs configured, admin alert dropped")
        return

    delivered = run_async(
        _send_admin_message_async(settings.telegram_bot_token, admin_ids, message)
    )
    logger.info(
        f"Admin alert delivered to {delivered}/{len(admin_ids)} admins"
    )


async def _send_admin_message_async(
    token: str, admin_ids: list[int], message: str
) -> int:
    """Send message to admins, returning number of successful deliveries."""
    bot = Bot(token=token)
    delivered = 0
    try:
        for admin_id in admin_ids:
            try:
                await asyncio.wait_for(
                    bot.send_message(
                        chat_id=admin_id,
                        text=message,
                        parse_mode="Markdown",
                    ),
                    timeout=TELEGRAM_TIMEOUT,
                )
                delivered += 1
            except TimeoutError:
                logger.warning(f"Timeout notifying admin {admin_id}")
            except Exception as e:
                logger.warning(f"Failed to notify admin {admin_id}: {e}")

            await asyncio.sleep(TELEGRAM_MESSAGE_DELAY)
    finally:
        await bot.session.close()

    return delivered


@dramatiq.actor(
    max_retries=NOTIFICATION_MAX_RETRIES, time_limit=DRAMATIQ_TIME_LIMIT_SHORT
)
def send_email(
    to_email: str,
    subject: str,
    html_content: str,
    text_content: str | None = None,
) -> None:
    """
    Send email over SMTP.

    SMTP errors propagate so dramatiq retries the delivery.
    """
    settings = get_settings()

    if not settings.email_enabled:
        logger.warning("Email not configured, SMTP credentials missing")
        return

    msg = build_message(settings, to_email, subject, html_content, text_content)

    with smtplib.SMTP(
        settings.smtp_host, settings.smtp_port, timeout=SMTP_TIMEOUT
    ) as server:
        if settings.smtp_use_tls:
            server.starttls()
        server.login(settings.smtp_user, settings.smtp_password)
        server.sendmail(settings.sender_address, to_email, msg.as_string())

    logger.info("Email sent", extra={"to": to_email, "subject": subject})


def build_message(
    settings: Settings,
    to_email: str,
    subject: str,
    html_content: str,
    text_content: str | None = None,
) -> MIMEMultipart:
    """Build multipart message with optional plain text alternative."""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.smtp_from_name} <{settings.sender_address}>"
    msg["To"] = to_email

    if text_content:
        msg.attach(MIMEText(text_content, "plain"))
    msg.attach(MIMEText(html_content, "html"))

    return msg
