"""
FraudLog model.

Append-only record of a fraud evaluation.
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from affiliate_ledger.models.base import Base
from affiliate_ledger.models.enums import FraudLogStatus
from affiliate_ledger.models.types import JsonType


class FraudLog(Base):
    """Fraud evaluation log entry. Rows are never updated or deleted."""

    __tablename__ = "affiliate_fraud_logs"
    __table_args__ = (
        Index("ix_affiliate_fraud_logs_affiliate_created", "affiliate_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    affiliate_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("affiliates.id", ondelete="CASCADE"),
        nullable=False,
    )
    order_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    risk_score: Mapped[int] = mapped_column(Integer, nullable=False)
    reasons: Mapped[list[str]] = mapped_column(JsonType, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=FraudLogStatus.FLAGGED
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<FraudLog(id={self.id}, affiliate_id={self.affiliate_id}, "
            f"order_id={self.order_id}, score={self.risk_score})>"
        )
