"""
Commission model.

Ledger row recording the commission owed to an affiliate for one order.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from affiliate_ledger.models.base import Base
from affiliate_ledger.models.enums import CommissionStatus
from affiliate_ledger.models.types import MoneyType, RateType


class Commission(Base):
    """
    Commission entity.

    order_total and commission_rate are snapshots taken at conversion time;
    commission_amount == order_total * commission_rate. Refunds against a
    paid commission never rewrite it: a compensating row with negative
    amounts is appended and points back via adjusts_commission_id.

    Attributes:
        id: Primary key
        affiliate_id: Earning affiliate
        order_id: Attributed order
        click_id: Originating attribution session (optional)
        adjusts_commission_id: Original commission (compensating rows only)
        order_total: Order total snapshot
        commission_rate: Rate snapshot (fraction)
        commission_amount: Derived amount
        status: pending / approved / paid / cancelled / disputed
        paid_at: Settlement timestamp
        payment_method: Settlement method
        payment_reference: External payment reference
        payment_notes: Free-form settlement notes
    """

    __tablename__ = "affiliate_commissions"
    __table_args__ = (
        CheckConstraint(
            "commission_rate >= 0 AND commission_rate <= 1",
            name="check_commission_rate_range",
        ),
        Index("ix_affiliate_commissions_affiliate_status", "affiliate_id", "status"),
        Index("ix_affiliate_commissions_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    affiliate_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("affiliates.id", ondelete="CASCADE"),
        nullable=False,
    )
    order_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    click_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("affiliate_clicks.id", ondelete="SET NULL"),
        nullable=True,
    )
    adjusts_commission_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("affiliate_commissions.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Snapshot at conversion time
    order_total: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    commission_rate: Mapped[Decimal] = mapped_column(RateType, nullable=False)
    commission_amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False
    )

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CommissionStatus.PENDING
    )

    # Settlement
    paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    payment_method: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    payment_reference: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    payment_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Audit
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )
    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Commission(id={self.id}, affiliate_id={self.affiliate_id}, "
            f"order_id={self.order_id}, amount={self.commission_amount}, "
            f"status={self.status})>"
        )

    @property
    def is_adjustment(self) -> bool:
        """Compensating entry created by a refund."""
        return self.adjusts_commission_id is not None
