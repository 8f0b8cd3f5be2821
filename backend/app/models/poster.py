"""Poster listing model."""
from datetime import datetime
from uuid import uuid4
from sqlalchemy import String, Integer, DateTime, Text, JSON, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base

POSTER_STATUSES = ("pending", "approved", "rejected", "willBeDeleted")


class Poster(Base):
    """A creator-submitted design, moderated by an admin and optionally linked to a Shopify product."""

    __tablename__ = "posters"

    # Primary key
    uuid: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))

    # Listing info
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="pending")  # see POSTER_STATUSES
    drive_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    image_urls: Mapped[list] = mapped_column(JSON, default=list)
    prices: Mapped[dict] = mapped_column(JSON, default=dict)  # {"50x70": 20.0, ...}
    selected_sizes: Mapped[list] = mapped_column(JSON, default=list)
    sales: Mapped[int] = mapped_column(Integer, default=0)

    # Shop link, set by an admin once the product exists in Shopify.
    # Stored either as a numeric id or as a GID ("gid://shopify/Product/123").
    shopify_product_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    shopify_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Foreign key
    creator_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.uuid"), nullable=False)

    # Timestamps
    upload_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    creator: Mapped["User"] = relationship("User", back_populates="posters", foreign_keys=[creator_id])

    # Indexes
    __table_args__ = (
        Index("idx_poster_creator_id", "creator_id"),
        Index("idx_poster_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Poster(uuid={self.uuid}, title={self.title}, status={self.status})>"
