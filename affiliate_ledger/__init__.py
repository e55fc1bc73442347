"""
Affiliate attribution and commission ledger.

Tracks referral clicks, attributes orders to affiliates, manages the
commission lifecycle, batches payouts, reverses refunds and screens for
fraud.
"""

__version__ = "1.0.0"
