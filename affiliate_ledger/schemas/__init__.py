"""Input schemas."""

from affiliate_ledger.schemas.affiliate import AffiliateRegistration, LinkRequest
from affiliate_ledger.schemas.tracking import ClickMetadata


__all__ = [
    "AffiliateRegistration",
    "ClickMetadata",
    "LinkRequest",
]
