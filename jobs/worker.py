"""
Dramatiq worker entrypoint.

Run with:
    dramatiq jobs.worker

Configures logging and registers every ledger actor with the broker.
"""

from affiliate_ledger.config.settings import get_settings
from affiliate_ledger.utils.logging import setup_logging
from jobs.broker import broker
from jobs.tasks import ledger_notifications


setup_logging(get_settings().log_level, log_file="logs/worker.log")

__all__ = ["broker", "ledger_notifications"]
