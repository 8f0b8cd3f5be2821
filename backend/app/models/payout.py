"""Payout ledger model."""
from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import String, Date, DateTime, Numeric, Text, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

PAYOUT_STATUSES = ("pending", "completed")


class Payout(Base):
    """Commission owed to a creator for one calendar-month period.

    Append-only per creator per period: the unique constraint on
    (creator_id, period_start, period_end) guarantees at most one row even
    when two payout runs race.
    """
    __tablename__ = "payouts"

    uuid: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    creator_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.uuid"), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)  # creator name at creation time
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="GBP")
    method: Mapped[str | None] = mapped_column(String(20), nullable=True)  # "iban", "paypal"
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)

    # Set only when an admin overrode the computed commission
    calculated_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    override_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    override_by: Mapped[str | None] = mapped_column(String(36), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    creator = relationship("User", foreign_keys=[creator_id])

    __table_args__ = (
        UniqueConstraint("creator_id", "period_start", "period_end", name="uq_payout_creator_period"),
        Index("idx_payout_creator_id", "creator_id"),
        Index("idx_payout_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Payout(uuid={self.uuid}, creator_id={self.creator_id}, amount={self.amount}, period={self.period_start}..{self.period_end})>"
