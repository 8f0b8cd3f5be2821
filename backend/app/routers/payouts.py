"""Monthly payout job endpoint, called by an external cron or by an admin."""
import json
import logging
import math
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.schemas.payouts import PayoutOutcomeResponse, PayoutRunResponse, PeriodResponse
from app.auth.dependencies import cron_or_admin_required
from app.services.currency import CurrencyNormalizer, get_currency_normalizer
from app.services.email_service import EmailService
from app.services.payouts import CreatorPayoutCalculator, InvalidPeriodError, month_date_range
from app.services.revenue import RevenueAggregator, get_revenue_aggregator

logger = logging.getLogger(__name__)

router = APIRouter()


def parse_manual_amounts(raw: Optional[str]) -> dict[str, float]:
    """Parse the ``manual_amounts`` query value: a JSON object of creator id -> amount."""
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="manual_amounts must be a JSON object"
        )
    if not isinstance(parsed, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="manual_amounts must be a JSON object"
        )
    for creator_id, amount in parsed.items():
        if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not math.isfinite(amount) or amount < 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid manual amount for creator {creator_id}"
            )
    return parsed


@router.api_route("/monthly-payouts", methods=["GET", "POST"], response_model=PayoutRunResponse)
async def monthly_payouts(
    date: Optional[str] = Query(None, description="YYYY-MM or YYYY-MM-DD; defaults to last month"),
    preview: bool = Query(False),
    manual_amounts: Optional[str] = Query(None, description='JSON object, e.g. {"<creator id>": 42.5}'),
    override_reason: Optional[str] = Query(None, max_length=1000),
    actor: Optional[User] = Depends(cron_or_admin_required),
    db: AsyncSession = Depends(get_db),
    aggregator: RevenueAggregator = Depends(get_revenue_aggregator),
    normalizer: CurrencyNormalizer = Depends(get_currency_normalizer)
):
    """
    Calculate creator payouts for a calendar month.

    - ``preview=true`` computes amounts without writing payouts
    - Creators who already have a payout for the period are reported as conflicts
    - Manual amounts replace the computed commission; the computed value,
      reason and acting admin are stored with the payout
    """
    try:
        period_start, period_end = month_date_range(date)
    except InvalidPeriodError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    amounts = parse_manual_amounts(manual_amounts)

    calculator = CreatorPayoutCalculator(
        db,
        aggregator,
        normalizer,
        notifier=EmailService.send_payout_created_email,
    )
    try:
        run = await calculator.run(
            period_start,
            period_end,
            preview=preview,
            manual_amounts=amounts,
            override_reason=override_reason,
            actor_id=actor.uuid if actor else None,
        )
    except Exception as e:
        logger.error(f"Error processing monthly payouts: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process monthly payouts"
        )

    return PayoutRunResponse(
        message=run.message,
        period=PeriodResponse(start=run.period_start, end=run.period_end),
        preview=run.preview,
        results=[PayoutOutcomeResponse.model_validate(outcome) for outcome in run.results],
    )
