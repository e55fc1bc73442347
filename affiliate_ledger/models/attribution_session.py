"""
AttributionSession model.

Click record correlating a referral visit with a later order.
"""

from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from affiliate_ledger.models.base import Base


class AttributionSession(Base):
    """
    Attribution session (affiliate click).

    `converted` flips false -> true exactly once, through a conditional
    update on the session token.
    """

    __tablename__ = "affiliate_clicks"
    __table_args__ = (
        Index("ix_affiliate_clicks_affiliate_created", "affiliate_id", "created_at"),
        Index("ix_affiliate_clicks_affiliate_ip", "affiliate_id", "ip_address"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    session_token: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, index=True
    )
    affiliate_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("affiliates.id", ondelete="CASCADE"),
        nullable=False,
    )
    affiliate_link_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("affiliate_links.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Request metadata
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)
    referrer: Mapped[str | None] = mapped_column(String(500), nullable=True)
    landing_page: Mapped[str | None] = mapped_column(String(500), nullable=True)
    campaign: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Conversion
    converted: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    conversion_order_id: Mapped[int | None] = mapped_column(
        Integer, nullable=True, index=True
    )
    converted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<AttributionSession(id={self.id}, affiliate_id={self.affiliate_id}, "
            f"converted={self.converted})>"
        )
