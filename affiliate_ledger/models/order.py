"""
Order model.

Mapping of the storefront orders table, limited to the columns the ledger
reads (totals, customer email) and annotates (affiliate attribution).
Orders are created by the storefront, never by the ledger.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from affiliate_ledger.models.base import Base
from affiliate_ledger.models.types import MoneyType


class Order(Base):
    """Storefront order (ledger view)."""

    __tablename__ = "orders"
    __table_args__ = (
        Index("ix_orders_affiliate_created", "affiliate_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    total_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    customer_email: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    status: Mapped[str | None] = mapped_column(String(30), nullable=True)

    # Affiliate attribution annotations
    affiliate_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    affiliate_click_id: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )
    affiliate_commission_amount: Mapped[Decimal | None] = mapped_column(
        MoneyType, nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Order(id={self.id}, total={self.total_amount}, "
            f"affiliate_id={self.affiliate_id})>"
        )
