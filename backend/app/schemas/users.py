"""Creator profile schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from app.models.user import PAYMENT_METHODS
from app.services.currency import SUPPORTED_CURRENCIES


class ProfileResponse(BaseModel):
    """Creator profile including payout details (owner and admin view)."""

    uuid: str
    name: str
    email: str
    user_role: str
    approved: bool
    status: str
    vendor: Optional[str] = None
    country: Optional[str] = None
    bio: Optional[str] = None
    instagram: Optional[str] = None
    portfolio: Optional[str] = None
    avatar_url: Optional[str] = None
    payment_method: Optional[str] = None
    iban: Optional[str] = None
    paypal_email: Optional[str] = None
    currency: str
    created_at: datetime

    @field_validator("approved", mode="before")
    @classmethod
    def unset_approval_is_pending(cls, v: Optional[bool]) -> bool:
        return bool(v)

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    """Schema for creator self-service profile update."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    vendor: Optional[str] = Field(None, max_length=255)
    country: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=2000)
    instagram: Optional[str] = Field(None, max_length=255)
    portfolio: Optional[str] = Field(None, max_length=255)
    avatar_url: Optional[str] = Field(None, max_length=500)
    payment_method: Optional[str] = None
    iban: Optional[str] = Field(None, max_length=64)
    paypal_email: Optional[EmailStr] = None
    currency: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.upper()
        if v not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Currency must be one of {', '.join(SUPPORTED_CURRENCIES)}")
        return v

    @field_validator("payment_method")
    @classmethod
    def validate_payment_method(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in PAYMENT_METHODS:
            raise ValueError(f"Payment method must be one of {', '.join(PAYMENT_METHODS)}")
        return v

    @field_validator("iban")
    @classmethod
    def normalize_iban(cls, v: Optional[str]) -> Optional[str]:
        return v.replace(" ", "").upper() if v else v

    @model_validator(mode="after")
    def check_payment_details(self) -> "ProfileUpdate":
        """Choosing a method requires the matching account detail in the same request."""
        if self.payment_method == "iban" and not self.iban:
            raise ValueError("IBAN is required for bank transfer payouts")
        if self.payment_method == "paypal" and not self.paypal_email:
            raise ValueError("PayPal email is required for PayPal payouts")
        return self
