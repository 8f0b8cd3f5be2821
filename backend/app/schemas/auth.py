"""Authentication schemas for creator registration, login, and token management."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator


class UserRegister(BaseModel):
    """Schema for creator registration."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8)
    vendor: Optional[str] = Field(None, max_length=255)
    country: Optional[str] = Field(None, max_length=100)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        """Validate password strength: min 8 chars, at least 1 uppercase, 1 lowercase, 1 number."""
        if not any(c.isupper() for c in v):
            raise ValueError("Password must contain at least one uppercase letter")
        if not any(c.islower() for c in v):
            raise ValueError("Password must contain at least one lowercase letter")
        if not any(c.isdigit() for c in v):
            raise ValueError("Password must contain at least one digit")
        return v


class UserLogin(BaseModel):
    """Schema for user login."""

    email: EmailStr
    password: str


class Token(BaseModel):
    """Schema for JWT token response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshTokenRequest(BaseModel):
    """Schema for refresh token request."""

    refresh_token: str


class UserResponse(BaseModel):
    """Schema for account response (never expose password_hash)."""

    uuid: str
    name: str
    email: str
    user_role: str
    approved: bool
    status: str
    vendor: Optional[str] = None
    currency: str
    created_at: datetime

    @field_validator("approved", mode="before")
    @classmethod
    def unset_approval_is_pending(cls, v: Optional[bool]) -> bool:
        return bool(v)

    class Config:
        from_attributes = True


class RegisterResponse(BaseModel):
    """New accounts get tokens right away but stay unapproved until an admin reviews them."""

    user: UserResponse
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
