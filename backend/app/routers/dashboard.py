"""Creator dashboard endpoints: live sales stats, earnings and payouts."""
from datetime import date, timedelta
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.database import get_db
from app.models.poster import Poster
from app.models.user import User
from app.schemas.dashboard import CreatorStatsResponse, EarningsResponse, ProductStatsResponse
from app.schemas.payouts import CreatorPayoutsResponse, PayoutResponse
from app.auth.dependencies import get_current_active_user
from app.services.dashboard import DashboardService, get_dashboard_service
from app.services.payout_ledger import PayoutLedger
from app.services.revenue import numeric_product_id

router = APIRouter()


def _check_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date must not be after end_date"
        )


@router.get("/stats", response_model=CreatorStatsResponse)
async def get_stats(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: User = Depends(get_current_active_user),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Revenue, sales and commission across the creator's approved posters."""
    _check_range(start_date, end_date)
    return await service.creator_stats(current_user, start_date, end_date)


@router.get("/stats/product/{poster_id}", response_model=ProductStatsResponse)
async def get_product_stats(
    poster_id: str,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: User = Depends(get_current_active_user),
    service: DashboardService = Depends(get_dashboard_service),
    db: AsyncSession = Depends(get_db)
):
    """Sales of one poster. Defaults to all time."""
    _check_range(start_date, end_date)
    query = select(Poster).where(Poster.uuid == poster_id)
    if not current_user.is_admin:
        query = query.where(Poster.creator_id == current_user.uuid)
    result = await db.execute(query)
    poster = result.scalar_one_or_none()

    if not poster:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Poster not found"
        )

    product_id = numeric_product_id(poster.shopify_product_id)
    if not product_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Poster is not linked to a Shopify product"
        )

    stats = await service.product_stats(
        product_id, start_date, end_date, title=poster.title, currency=current_user.currency
    )
    response = ProductStatsResponse.model_validate(stats)
    response.poster_id = poster.uuid
    return response


@router.get("/earnings", response_model=EarningsResponse)
async def get_earnings(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    current_user: User = Depends(get_current_active_user),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Commission totals, Jan-Dec chart data and top five posters."""
    _check_range(start_date, end_date)
    return await service.creator_earnings(current_user, start_date, end_date, year)


@router.get("/payouts", response_model=CreatorPayoutsResponse)
async def get_payouts(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Creator's payouts (filtered by creation date, end date inclusive) and lifetime earnings."""
    _check_range(start_date, end_date)
    ledger = PayoutLedger(db)
    payouts = await ledger.list_by_creator(
        current_user.uuid,
        start_date=start_date,
        end_date=end_date + timedelta(days=1) if end_date else None,
    )
    lifetime = await ledger.sum_amounts(current_user.uuid)

    return CreatorPayoutsResponse(
        payouts=[PayoutResponse.model_validate(p) for p in payouts],
        lifetime_earnings=float(lifetime),
        currency=current_user.currency,
    )
