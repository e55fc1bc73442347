"""
Payout models.

A payout batches approved commissions of one affiliate for settlement.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from affiliate_ledger.models.base import Base
from affiliate_ledger.models.enums import PayoutStatus
from affiliate_ledger.models.types import MoneyType


class Payout(Base):
    """
    Payout batch.

    total_amount and commission_count are captured at creation and never
    recomputed. Completing a payout cascades paid status onto every linked
    commission.
    """

    __tablename__ = "affiliate_payouts"
    __table_args__ = (
        Index("ix_affiliate_payouts_affiliate_status", "affiliate_id", "status"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    affiliate_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("affiliates.id", ondelete="CASCADE"),
        nullable=False,
    )

    total_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    commission_count: Mapped[int] = mapped_column(Integer, nullable=False)
    payout_method: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PayoutStatus.PENDING
    )

    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    processed_by: Mapped[str | None] = mapped_column(
        String(64), nullable=True
    )
    payment_reference: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Payout(id={self.id}, affiliate_id={self.affiliate_id}, "
            f"total={self.total_amount}, count={self.commission_count}, "
            f"status={self.status})>"
        )


class PayoutCommission(Base):
    """Join row linking a payout to one of its commissions."""

    __tablename__ = "affiliate_payout_commissions"
    __table_args__ = (
        UniqueConstraint(
            "payout_id", "commission_id", name="uq_payout_commission"
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    payout_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("affiliate_payouts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    commission_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("affiliate_commissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
