"""Schemas for creator dashboard endpoints."""
from typing import Optional
from pydantic import BaseModel

from app.schemas.payouts import OrderContributionResponse, VariantRevenueResponse


class ProductSummaryResponse(BaseModel):
    poster_id: str
    title: str
    status: str
    product_id: Optional[str] = None
    image: str
    sales_count: int
    revenue: float
    commission: float

    class Config:
        from_attributes = True


class OrderSummaryResponse(BaseModel):
    order_id: str
    order_name: str
    date: str
    quantity: int
    total: float

    class Config:
        from_attributes = True


class TrendPointResponse(BaseModel):
    month: str
    year: int
    sales: int
    revenue: float

    class Config:
        from_attributes = True


class CreatorStatsResponse(BaseModel):
    total_revenue: float
    total_sales: int
    total_commission: float
    average_order_value: float
    orders_count: int
    products_count: int
    approved_products_count: int
    currency: str
    products: list[ProductSummaryResponse] = []
    orders: list[OrderSummaryResponse] = []
    sales_trend: list[TrendPointResponse] = []

    class Config:
        from_attributes = True


class MonthlyPointResponse(BaseModel):
    month: str
    earnings: float
    sales: int

    class Config:
        from_attributes = True


class TopPosterResponse(BaseModel):
    id: str
    title: str
    image: str
    sales: int
    revenue: float

    class Config:
        from_attributes = True


class EarningsResponse(BaseModel):
    earnings: float
    sales: int
    commission: int
    currency: str
    year: int
    chart: list[MonthlyPointResponse]
    top_selling_posters: list[TopPosterResponse]

    class Config:
        from_attributes = True


class ProductStatsResponse(BaseModel):
    poster_id: Optional[str] = None
    product_id: str
    title: str
    sales_count: int
    revenue: float
    commission: float
    currency: str
    variants: list[VariantRevenueResponse] = []
    recent_orders: list[OrderContributionResponse] = []

    class Config:
        from_attributes = True
