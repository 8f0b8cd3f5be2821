"""Schemas for poster listings."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from app.models.poster import POSTER_STATUSES

# Print sizes offered in the shop and the lowest retail price allowed for each
POSTER_SIZES = {
    "21x30": {"label": "A4", "min_price": 13, "dimensions": "21 × 30 cm"},
    "30x40": {"label": "3:4", "min_price": 16, "dimensions": "30 × 40 cm"},
    "50x70": {"label": "Standard", "min_price": 20, "dimensions": "50 × 70 cm"},
    "70x100": {"label": "Large Standard", "min_price": 27, "dimensions": "70 × 100 cm"},
    "50x50": {"label": "1:1", "min_price": 10, "dimensions": "50 × 50 cm"},
}


class PosterCreate(BaseModel):
    """Schema for submitting a poster for review."""

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    drive_link: Optional[str] = Field(None, max_length=500)
    image_urls: list[str] = Field(default_factory=list)
    selected_sizes: list[str] = Field(..., min_length=1)
    prices: dict[str, float] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_sizes_and_prices(self) -> "PosterCreate":
        for size in self.selected_sizes:
            if size not in POSTER_SIZES:
                raise ValueError(f"Unknown poster size: {size}")
            price = self.prices.get(size)
            if price is None:
                raise ValueError(f"Price required for size {size}")
            if price < POSTER_SIZES[size]["min_price"]:
                raise ValueError(f"Price for {size} must be at least {POSTER_SIZES[size]['min_price']}")
        return self


class PosterResponse(BaseModel):
    """Schema for poster response."""

    uuid: str
    title: str
    description: Optional[str] = None
    status: str
    drive_link: Optional[str] = None
    image_urls: list[str] = []
    prices: dict[str, float] = {}
    selected_sizes: list[str] = []
    sales: int = 0
    shopify_product_id: Optional[str] = None
    shopify_url: Optional[str] = None
    creator_id: str
    upload_date: datetime

    class Config:
        from_attributes = True


class AdminPosterResponse(PosterResponse):
    creator_name: str = "Unknown Creator"


class AdminPosterUpdate(BaseModel):
    """Moderation update: status and/or the Shopify link."""

    poster_id: str
    status: Optional[str] = None
    shopify_url: Optional[str] = Field(None, max_length=500)
    shopify_product_id: Optional[str] = Field(None, max_length=255)

    @model_validator(mode="after")
    def check_status(self) -> "AdminPosterUpdate":
        if self.status is not None and self.status not in POSTER_STATUSES:
            raise ValueError(f"Status must be one of {', '.join(POSTER_STATUSES)}")
        return self
