"""Schemas for currency endpoints."""
from pydantic import BaseModel


class RatesResponse(BaseModel):
    rates: dict[str, dict[str, float]]
    currencies: list[str]


class ConversionResponse(BaseModel):
    amount: float
    converted: float
    from_currency: str
    to_currency: str
    rate: float
    formatted: str
