"""Schemas for payouts and payout runs."""
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, field_validator

from app.models.payout import PAYOUT_STATUSES


class PayoutResponse(BaseModel):
    """Ledger row."""

    uuid: str
    creator_id: str
    name: Optional[str] = None
    amount: float
    currency: str
    method: Optional[str] = None
    status: str
    period_start: date
    period_end: date
    calculated_amount: Optional[float] = None
    override_reason: Optional[str] = None
    override_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PayoutStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        if v not in PAYOUT_STATUSES:
            raise ValueError(f"Status must be one of {', '.join(PAYOUT_STATUSES)}")
        return v


class CreatorPayoutsResponse(BaseModel):
    """Creator's own payouts plus the all-time total."""

    payouts: list[PayoutResponse]
    lifetime_earnings: float
    currency: str


class OrderContributionResponse(BaseModel):
    order_id: str
    order_name: str
    date: str
    quantity: int
    price_paid: float
    line_total: float

    class Config:
        from_attributes = True


class VariantRevenueResponse(BaseModel):
    variant_id: str
    title: str
    total_sold: int
    total_revenue: float
    currency: str
    orders: list[OrderContributionResponse] = []

    class Config:
        from_attributes = True


class ProductBreakdownResponse(BaseModel):
    product_id: str
    title: str
    revenue: float
    sales: int
    currency: str
    converted_revenue: float
    variants: list[VariantRevenueResponse] = []

    class Config:
        from_attributes = True


class PayoutOutcomeResponse(BaseModel):
    creator_id: str
    creator_name: str
    status: str
    success: bool
    message: str
    amount: float
    calculated_amount: float
    manual_amount: Optional[float] = None
    currency: str
    revenue: float
    sales: int
    revenue_products: int
    payout_id: Optional[str] = None
    products: list[ProductBreakdownResponse] = []

    class Config:
        from_attributes = True


class PeriodResponse(BaseModel):
    start: date
    end: date


class PayoutRunResponse(BaseModel):
    message: str
    period: PeriodResponse
    preview: bool
    results: list[PayoutOutcomeResponse]
