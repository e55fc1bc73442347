"""
Operational constants for the affiliate ledger.

Timeouts, retry and task limits used by the notification workers.
"""

# =============================================================================
# NOTIFICATION DELIVERY
# =============================================================================

# Telegram API operations timeout (seconds)
TELEGRAM_TIMEOUT = 10.0

# Delay between admin messages (seconds); Telegram allows ~30 msg/sec
TELEGRAM_MESSAGE_DELAY = 0.1

# SMTP connection timeout (seconds)
SMTP_TIMEOUT = 10

# Notification operations
NOTIFICATION_MAX_RETRIES = 3


# =============================================================================
# DRAMATIQ TASK TIME LIMITS (milliseconds)
# =============================================================================

# Short tasks (1 minute) - single message or email delivery
DRAMATIQ_TIME_LIMIT_SHORT = 60_000
