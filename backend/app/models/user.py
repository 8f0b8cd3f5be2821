"""User model for creators and admins."""
from datetime import datetime
from uuid import uuid4
from sqlalchemy import String, Boolean, DateTime, Text, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base

ROLES = ("creator", "admin")
PAYMENT_METHODS = ("iban", "paypal")


class User(Base):
    """Creator or admin account, including the creator's public profile and payout details."""

    __tablename__ = "users"

    # Primary key
    uuid: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))

    # Login
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Account info
    status: Mapped[str] = mapped_column(String(50), default="active")
    user_role: Mapped[str] = mapped_column(String(50), default="creator")  # "creator", "admin"
    approved: Mapped[bool] = mapped_column(Boolean, default=False)  # creators need admin approval

    # Public profile
    vendor: Mapped[str | None] = mapped_column(String(255), nullable=True)  # vendor name on the shop
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    instagram: Mapped[str | None] = mapped_column(String(255), nullable=True)
    portfolio: Mapped[str | None] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Payout details
    payment_method: Mapped[str | None] = mapped_column(String(20), nullable=True)  # "iban", "paypal"
    iban: Mapped[str | None] = mapped_column(String(64), nullable=True)
    paypal_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default="GBP")  # display + payout currency

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    posters: Mapped[list["Poster"]] = relationship("Poster", back_populates="creator")

    # Indexes
    __table_args__ = (
        Index("idx_user_email", "email"),
        Index("idx_user_role_approved", "user_role", "approved"),
    )

    @property
    def is_admin(self) -> bool:
        return self.user_role == "admin"

    def __repr__(self) -> str:
        return f"<User(uuid={self.uuid}, email={self.email}, role={self.user_role})>"
