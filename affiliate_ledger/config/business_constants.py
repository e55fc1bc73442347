"""
Business logic constants for the affiliate ledger.

Central location for program rules, fraud scoring weights and thresholds.
Imported by services and settings without circular dependencies.
"""

from decimal import Decimal


# Commission rate assigned on registration (fraction, 0..1)
DEFAULT_COMMISSION_RATE = Decimal("0.10")
MIN_COMMISSION_RATE = Decimal("0")
MAX_COMMISSION_RATE = Decimal("1")
# Storage precision of rate columns (DECIMAL(5, 4))
RATE_QUANTUM = Decimal("0.0001")

# Storage precision of money columns (DECIMAL(18, 8))
MONEY_QUANTUM = Decimal("0.00000001")

# Referral code format
AFFILIATE_CODE_LENGTH = 8
AFFILIATE_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
AFFILIATE_CODE_MAX_ATTEMPTS = 5

# Fraud scoring: points per signal
FRAUD_SCORE_SELF_REFERRAL = 50
FRAUD_SCORE_CLICK_FLOODING = 30
FRAUD_SCORE_ABNORMAL_CONVERSION = 25
FRAUD_SCORE_ORDER_BURST = 20
FRAUD_SCORE_NEW_AFFILIATE_HIGH_VALUE = 15
FRAUD_SCORE_MAX = 100

# Fraud signal thresholds
CLICK_FLOODING_MAX_CLICKS = 10
CLICK_FLOODING_WINDOW_HOURS = 24
ABNORMAL_CONVERSION_RATE = Decimal("0.5")
CONVERSION_WINDOW_DAYS = 30
ORDER_BURST_MAX_ORDERS = 5
ORDER_BURST_WINDOW_HOURS = 1
NEW_AFFILIATE_AGE_DAYS = 7
HIGH_VALUE_ORDER_TOTAL = Decimal("5000")

# Fraud outcomes
SUSPICIOUS_SCORE_THRESHOLD = 50
AUTO_SUSPEND_SCORE_THRESHOLD = 80

# Risk profile classification
RISK_PROFILE_WINDOW_DAYS = 30
HIGH_RISK_AVERAGE_SCORE = 70
HIGH_RISK_RECENT_FLAGS = 5
MEDIUM_RISK_AVERAGE_SCORE = 40
MEDIUM_RISK_RECENT_FLAGS = 2

# Fraud reason codes
REASON_SELF_REFERRAL = "self_referral"
REASON_CLICK_FLOODING = "click_flooding"
REASON_ABNORMAL_CONVERSION = "abnormal_conversion_rate"
REASON_ORDER_BURST = "order_burst"
REASON_NEW_AFFILIATE_HIGH_VALUE = "new_affiliate_high_value"
REASON_CHECK_FAILED = "check_failed"

# Actor recorded on automated fraud actions
FRAUD_DETECTION_ACTOR = "system:fraud_detection"
