"""Public currency endpoints."""
from decimal import Decimal, InvalidOperation
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas.currency import ConversionResponse, RatesResponse
from app.services.currency import (
    SUPPORTED_CURRENCIES,
    CurrencyNormalizer,
    UnsupportedCurrencyError,
    format_currency,
    get_currency_normalizer,
)

router = APIRouter()


@router.get("/rates", response_model=RatesResponse)
async def get_rates(normalizer: CurrencyNormalizer = Depends(get_currency_normalizer)):
    """Current rate matrix (source -> target -> multiplier)."""
    rates = await normalizer.get_rates()
    return {
        "rates": {base: {target: float(rate) for target, rate in row.items()} for base, row in rates.items()},
        "currencies": list(SUPPORTED_CURRENCIES),
    }


@router.get("/convert", response_model=ConversionResponse)
async def convert(
    amount: Optional[str] = Query(None),
    from_currency: Optional[str] = Query(None, alias="from"),
    to_currency: Optional[str] = Query(None, alias="to"),
    normalizer: CurrencyNormalizer = Depends(get_currency_normalizer)
):
    """Convert ``amount`` between two supported currencies."""
    if amount is None or not from_currency or not to_currency:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="amount, from and to are required"
        )
    try:
        value = Decimal(amount)
    except InvalidOperation:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="amount must be a number"
        )
    if not value.is_finite():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="amount must be a number"
        )

    try:
        rate = await normalizer.rate(from_currency, to_currency)
        converted = Decimal(str(await normalizer.convert(value, from_currency, to_currency)))
    except UnsupportedCurrencyError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    target = to_currency.upper()
    return {
        "amount": float(value),
        "converted": float(converted.quantize(Decimal("0.01"))),
        "from_currency": from_currency.upper(),
        "to_currency": target,
        "rate": float(rate),
        "formatted": format_currency(converted, target),
    }
