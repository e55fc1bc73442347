"""
Standard type definitions for database models.

Provides consistent types for monetary, rate and JSON fields across all models.
"""

from sqlalchemy import DECIMAL, JSON
from sqlalchemy.dialects.postgresql import JSONB

# Standard money type for order totals, commissions, payouts
# Precision: 18 digits total, 8 after decimal point
# Range: up to 9,999,999,999.99999999
MoneyType = DECIMAL(18, 8)

# Commission rate stored as a fraction of the order total
# Precision: 5 digits total, 4 after decimal point
# Range: 0.0000 to 1.0000 (enforced by check constraints)
RateType = DECIMAL(5, 4)

# JSON payloads: JSONB on PostgreSQL, generic JSON elsewhere
JsonType = JSON().with_variant(JSONB(), "postgresql")
