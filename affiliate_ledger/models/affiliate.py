"""
Affiliate model.

Represents a registered affiliate partner and its commission configuration.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from affiliate_ledger.config.business_constants import DEFAULT_COMMISSION_RATE
from affiliate_ledger.models.base import Base
from affiliate_ledger.models.enums import AffiliateStatus
from affiliate_ledger.models.types import JsonType, MoneyType, RateType


class Affiliate(Base):
    """
    Affiliate entity.

    Lifecycle: created as pending on registration, promoted to active or
    suspended only by administrative action. The commission rate is a
    fraction in [0, 1] and is snapshotted onto every commission at
    conversion time.

    Attributes:
        id: Primary key
        user_id: External account ID
        email: Account email (self-referral screening)
        affiliate_code: Public referral code embedded in tracked URLs
        status: pending / active / suspended / rejected
        commission_rate: Current commission rate (fraction)
        total_clicks: Lifetime click counter (reporting only)
        total_sales: Lifetime attributed sales (reporting only)
        total_commissions: Lifetime commission amount (reporting only)
        pending_commissions: Unpaid commission amount (reporting only)
        paid_commissions: Paid commission amount (reporting only)
    """

    __tablename__ = "affiliates"
    __table_args__ = (
        CheckConstraint(
            "commission_rate >= 0 AND commission_rate <= 1",
            name="check_affiliate_commission_rate_range",
        ),
        Index("ix_affiliates_status", "status"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Identity
    user_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True, unique=True, index=True
    )
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True
    )
    affiliate_code: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True, index=True
    )

    # Status and rate
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AffiliateStatus.PENDING
    )
    commission_rate: Mapped[Decimal] = mapped_column(
        RateType, nullable=False, default=DEFAULT_COMMISSION_RATE
    )

    # Profile
    business_name: Mapped[str] = mapped_column(String(255), nullable=False)
    website_url: Mapped[str | None] = mapped_column(
        String(500), nullable=True
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    social_media: Mapped[dict[str, Any] | None] = mapped_column(
        JsonType, nullable=True
    )
    tax_information: Mapped[dict[str, Any] | None] = mapped_column(
        JsonType, nullable=True
    )
    payment_details: Mapped[dict[str, Any] | None] = mapped_column(
        JsonType, nullable=True
    )

    # Lifetime aggregates (reporting projections, not ledger truth)
    total_clicks: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    total_sales: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    total_commissions: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    pending_commissions: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    paid_commissions: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_active: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Affiliate(id={self.id}, code={self.affiliate_code}, "
            f"status={self.status}, rate={self.commission_rate})>"
        )

    @property
    def is_active(self) -> bool:
        """Affiliate can receive tracked clicks."""
        return self.status == AffiliateStatus.ACTIVE
