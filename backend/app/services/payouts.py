"""Monthly creator payout calculation.

For every approved creator the calculator sums the revenue of their approved,
Shopify-linked posters over a calendar month, converts each product's revenue
into the creator's currency, and records 30% of the total as a pending payout.
A run is safe to repeat: a creator who already has a payout overlapping the
period gets a ``conflict`` outcome, and the unique constraint on
(creator_id, period_start, period_end) rejects a racing second insert.
"""
import calendar
import logging
import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.payout import Payout
from app.models.poster import Poster
from app.models.user import User
from app.services.currency import CurrencyNormalizer
from app.services.payout_ledger import DuplicatePayoutError, PayoutLedger
from app.services.revenue import RevenueAggregator, VariantRevenue, numeric_product_id

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENT = Decimal("0.01")

# Outcome statuses
CREATED = "created"
PREVIEW = "preview"
NO_REVENUE = "no_revenue"
BELOW_MINIMUM = "below_minimum"
CONFLICT = "conflict"
FAILED = "failed"

_MONTH_RE = re.compile(r"^\d{4}-\d{2}$")
_DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class InvalidPeriodError(ValueError):
    """Raised when a period string is neither ``YYYY-MM`` nor ``YYYY-MM-DD``."""


def month_date_range(date_string: Optional[str] = None, today: Optional[date] = None) -> tuple[date, date]:
    """First and last day of a calendar month.

    ``YYYY-MM`` or ``YYYY-MM-DD`` selects that month. With no string the
    month before ``today`` is used.
    """
    if date_string:
        if not (_MONTH_RE.match(date_string) or _DAY_RE.match(date_string)):
            raise InvalidPeriodError(f"Invalid period: {date_string!r} (expected YYYY-MM or YYYY-MM-DD)")
        try:
            if _MONTH_RE.match(date_string):
                year, month = (int(part) for part in date_string.split("-"))
                anchor = date(year, month, 1)
            else:
                anchor = date.fromisoformat(date_string)
        except ValueError as e:
            raise InvalidPeriodError(f"Invalid period: {date_string!r}") from e
    else:
        today = today or date.today()
        anchor = today.replace(day=1) - timedelta(days=1)

    last_day = calendar.monthrange(anchor.year, anchor.month)[1]
    return date(anchor.year, anchor.month, 1), date(anchor.year, anchor.month, last_day)


def commission_for(revenue: Decimal, rate: Optional[float] = None) -> Decimal:
    """Creator share of ``revenue``, rounded half-up to cents."""
    rate = settings.CREATOR_COMMISSION_RATE if rate is None else rate
    return (revenue * Decimal(str(rate))).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass
class CreatorSnapshot:
    """Plain copy of the creator fields a payout run needs."""
    id: str
    name: str
    email: str
    currency: str
    payment_method: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "CreatorSnapshot":
        return cls(
            id=user.uuid,
            name=user.name,
            email=user.email,
            currency=user.currency or settings.DEFAULT_CREATOR_CURRENCY,
            payment_method=user.payment_method,
        )


@dataclass
class ProductBreakdown:
    product_id: str
    title: str
    revenue: Decimal
    sales: int
    currency: str
    converted_revenue: Decimal
    variants: list[VariantRevenue] = field(default_factory=list)


@dataclass
class PayoutOutcome:
    creator_id: str
    creator_name: str
    status: str
    message: str
    currency: str
    amount: Decimal = ZERO
    calculated_amount: Decimal = ZERO
    manual_amount: Optional[Decimal] = None
    revenue: Decimal = ZERO
    sales: int = 0
    products: list[ProductBreakdown] = field(default_factory=list)
    payout_id: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status not in (CONFLICT, FAILED)

    @property
    def revenue_products(self) -> int:
        return sum(1 for p in self.products if p.revenue > 0)


@dataclass
class PayoutRun:
    period_start: date
    period_end: date
    preview: bool
    results: list[PayoutOutcome] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.preview:
            return "Monthly payouts preview generated"
        return "Monthly payouts processed successfully"

    @property
    def created_count(self) -> int:
        return sum(1 for r in self.results if r.status == CREATED)


PayoutNotifier = Callable[[CreatorSnapshot, Payout], bool]


class CreatorPayoutCalculator:
    """Computes and records one month of creator payouts."""

    def __init__(
        self,
        db: AsyncSession,
        aggregator: RevenueAggregator,
        normalizer: CurrencyNormalizer,
        ledger: Optional[PayoutLedger] = None,
        commission_rate: Optional[float] = None,
        minimum_amount: Optional[float] = None,
        notifier: Optional[PayoutNotifier] = None,
    ):
        self.db = db
        self.aggregator = aggregator
        self.normalizer = normalizer
        self.ledger = ledger or PayoutLedger(db)
        self.commission_rate = settings.CREATOR_COMMISSION_RATE if commission_rate is None else commission_rate
        minimum = settings.PAYOUT_MINIMUM_AMOUNT if minimum_amount is None else minimum_amount
        self.minimum_amount = Decimal(str(minimum))
        self.notifier = notifier

    async def approved_creators(self) -> list[CreatorSnapshot]:
        result = await self.db.execute(
            select(User)
            .where(User.user_role == "creator", User.approved.is_(True))
            .order_by(User.name)
        )
        return [CreatorSnapshot.from_user(user) for user in result.scalars().all()]

    async def linked_posters(self, creator_id: str) -> list[tuple[str, str]]:
        """(title, shopify_product_id) of the creator's approved, linked posters."""
        result = await self.db.execute(
            select(Poster.title, Poster.shopify_product_id).where(
                Poster.creator_id == creator_id,
                Poster.status == "approved",
                Poster.shopify_product_id.isnot(None),
            )
        )
        return [(title or "Untitled", product_id) for title, product_id in result.all()]

    async def run(
        self,
        period_start: date,
        period_end: date,
        preview: bool = False,
        manual_amounts: Optional[dict[str, float]] = None,
        override_reason: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> PayoutRun:
        """Process every approved creator; one creator's failure never stops the batch."""
        manual_amounts = manual_amounts or {}
        run = PayoutRun(period_start=period_start, period_end=period_end, preview=preview)
        logger.info(
            f"Starting monthly payout {'preview' if preview else 'processing'} "
            f"for period {period_start} to {period_end}"
        )

        creators = await self.approved_creators()
        for creator in creators:
            try:
                outcome = await self.process_creator(
                    creator, period_start, period_end, preview,
                    manual_amounts.get(creator.id), override_reason, actor_id,
                )
            except Exception as e:
                logger.error(f"Payout failed for creator {creator.id} ({creator.name}): {e}")
                await self.db.rollback()
                outcome = PayoutOutcome(
                    creator_id=creator.id,
                    creator_name=creator.name,
                    status=FAILED,
                    message=str(e) or e.__class__.__name__,
                    currency=creator.currency,
                )
            run.results.append(outcome)

        logger.info(
            f"Payout run {period_start} to {period_end} finished: "
            f"{len(run.results)} creators, {run.created_count} payouts created"
        )
        return run

    async def process_creator(
        self,
        creator: CreatorSnapshot,
        period_start: date,
        period_end: date,
        preview: bool = False,
        manual_amount: Optional[float] = None,
        override_reason: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> PayoutOutcome:
        outcome = PayoutOutcome(
            creator_id=creator.id,
            creator_name=creator.name,
            status=NO_REVENUE,
            message="No approved products",
            currency=creator.currency,
        )

        posters = await self.linked_posters(creator.id)
        if not posters:
            return outcome

        for title, stored_id in posters:
            product_id = numeric_product_id(stored_id)
            if not product_id:
                logger.warning(f"Invalid product ID format for creator {creator.id}: {stored_id!r}")
                continue

            product = await self.aggregator.product_revenue(product_id, period_start, period_end, title=title)
            converted = ZERO
            if product.revenue:
                converted = Decimal(str(
                    await self.normalizer.convert(product.revenue, product.currency, creator.currency)
                ))
            outcome.products.append(ProductBreakdown(
                product_id=product_id,
                title=title,
                revenue=product.revenue,
                sales=product.sales,
                currency=product.currency,
                converted_revenue=converted,
                variants=product.variants,
            ))
            outcome.revenue += converted
            outcome.sales += product.sales

        commission = commission_for(outcome.revenue, self.commission_rate)
        outcome.calculated_amount = commission
        logger.info(
            f"Creator {creator.id} ({creator.name}): revenue {outcome.revenue:.2f} {creator.currency}, "
            f"commission {commission:.2f} {creator.currency}, sales {outcome.sales}"
        )

        if commission <= 0:
            outcome.message = "No revenue in this period"
            return outcome

        manual = Decimal(str(manual_amount)).quantize(CENT, rounding=ROUND_HALF_UP) if manual_amount is not None else None
        outcome.manual_amount = manual
        final_amount = manual if manual is not None else commission
        outcome.amount = final_amount

        if manual is None and commission < self.minimum_amount:
            outcome.status = BELOW_MINIMUM
            outcome.message = f"Commission below minimum payout of {self.minimum_amount:.2f}"
            return outcome

        if await self.ledger.exists(creator.id, period_start, period_end):
            logger.info(f"Payout already exists for creator {creator.id} in this period")
            outcome.status = CONFLICT
            outcome.message = "Payout already exists for this period"
            return outcome

        if preview:
            outcome.status = PREVIEW
            outcome.message = "Payout preview generated"
            return outcome

        payout = Payout(
            creator_id=creator.id,
            name=creator.name,
            amount=final_amount,
            currency=creator.currency,
            method=creator.payment_method or "iban",
            status="pending",
            period_start=period_start,
            period_end=period_end,
        )
        if manual is not None:
            payout.calculated_amount = commission
            payout.override_reason = override_reason
            payout.override_by = actor_id

        try:
            await self.ledger.insert(payout)
        except DuplicatePayoutError:
            outcome.status = CONFLICT
            outcome.message = "Payout already exists for this period"
            return outcome
        await self.db.commit()

        logger.info(f"Created payout of {final_amount:.2f} {creator.currency} for creator {creator.id}")
        outcome.status = CREATED
        outcome.message = "Payout created successfully"
        outcome.payout_id = payout.uuid

        if self.notifier:
            self.notifier(creator, payout)
        return outcome
