"""
AffiliateLink model.

Named tracked URL variant owned by one affiliate.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from affiliate_ledger.models.base import Base
from affiliate_ledger.models.enums import LinkType
from affiliate_ledger.models.types import MoneyType


class AffiliateLink(Base):
    """
    Tracked link.

    The link type is fixed at creation; only the active flag is mutable.
    Counters are reporting aggregates.
    """

    __tablename__ = "affiliate_links"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    affiliate_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("affiliates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    link_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=LinkType.GENERAL
    )
    target_url: Mapped[str] = mapped_column(String(500), nullable=False)
    campaign_name: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )

    # Counters
    click_count: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    conversion_count: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    revenue_generated: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    last_clicked: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<AffiliateLink(id={self.id}, affiliate_id={self.affiliate_id}, "
            f"type={self.link_type}, active={self.is_active})>"
        )
