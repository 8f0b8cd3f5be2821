"""Schemas for support messages."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.support_message import SUPPORT_STATUSES


class SupportMessageCreate(BaseModel):
    """Support form submission. Name and email are taken from the account when logged in."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1, max_length=5000)
    vendor: Optional[str] = Field(None, max_length=255)


class SupportMessageResponse(BaseModel):
    uuid: str
    name: str
    email: str
    subject: str
    message: str
    vendor: Optional[str] = None
    status: str
    user_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class SupportStatusUpdate(BaseModel):
    message_id: str
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        if v not in SUPPORT_STATUSES:
            raise ValueError(f"Status must be one of {', '.join(SUPPORT_STATUSES)}")
        return v
