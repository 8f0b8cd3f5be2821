"""Support message model."""
from datetime import datetime
from uuid import uuid4
from sqlalchemy import String, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base

SUPPORT_STATUSES = ("new", "pending", "solved", "closed")


class SupportMessage(Base):
    """Message sent through the support form, by a logged-in creator or a visitor."""

    __tablename__ = "support_messages"

    uuid: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    vendor: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="new")
    user_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("users.uuid"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_support_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<SupportMessage(uuid={self.uuid}, subject={self.subject}, status={self.status})>"
