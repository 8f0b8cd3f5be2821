"""Creator dashboard figures computed live from Shopify orders.

All money is reported in the creator's currency. Products whose currency
cannot be converted are reported unconverted rather than dropped.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.models.poster import Poster
from app.models.user import User
from app.services.currency import CurrencyNormalizer, UnsupportedCurrencyError, get_currency_normalizer
from app.services.payouts import commission_for
from app.services.revenue import (
    OrderContribution,
    ProductRevenue,
    RevenueAggregator,
    VariantRevenue,
    get_revenue_aggregator,
    numeric_product_id,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
EARLIEST_DATE = date(2000, 1, 1)
MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
TOP_POSTERS_LIMIT = 5
RECENT_ORDERS_LIMIT = 10
TREND_MONTHS = 6


def contribution_date(contribution: OrderContribution) -> Optional[date]:
    try:
        return date.fromisoformat(contribution.date[:10])
    except ValueError:
        return None


def trailing_months(end_date: date, count: int = TREND_MONTHS) -> list[tuple[int, int]]:
    """The ``count`` (year, month) pairs ending with ``end_date``'s month, oldest first."""
    year, month = end_date.year, end_date.month
    months = []
    for _ in range(count):
        months.append((year, month))
        year, month = (year - 1, 12) if month == 1 else (year, month - 1)
    return months[::-1]


@dataclass
class ProductSummary:
    poster_id: str
    title: str
    status: str
    product_id: Optional[str]
    image: str = ""
    sales_count: int = 0
    revenue: Decimal = ZERO
    commission: Decimal = ZERO


@dataclass
class OrderSummary:
    """One order across all of a creator's products, in the creator's currency."""
    order_id: str
    order_name: str
    date: str
    quantity: int = 0
    total: Decimal = ZERO


@dataclass
class TrendPoint:
    month: str
    year: int
    sales: int = 0
    revenue: Decimal = ZERO


@dataclass
class CreatorStats:
    total_revenue: Decimal = ZERO
    total_sales: int = 0
    total_commission: Decimal = ZERO
    average_order_value: Decimal = ZERO
    orders_count: int = 0
    products_count: int = 0
    approved_products_count: int = 0
    currency: str = "GBP"
    products: list[ProductSummary] = field(default_factory=list)
    orders: list[OrderSummary] = field(default_factory=list)
    sales_trend: list[TrendPoint] = field(default_factory=list)


@dataclass
class MonthlyPoint:
    month: str
    earnings: Decimal = ZERO
    sales: int = 0


@dataclass
class TopPoster:
    id: str
    title: str
    image: str
    sales: int
    revenue: Decimal


@dataclass
class EarningsSummary:
    earnings: Decimal
    sales: int
    commission: int  # percent
    currency: str
    year: int
    chart: list[MonthlyPoint] = field(default_factory=list)
    top_selling_posters: list[TopPoster] = field(default_factory=list)


@dataclass
class ProductStats:
    product_id: str
    title: str
    sales_count: int
    revenue: Decimal
    commission: Decimal
    currency: str
    variants: list[VariantRevenue] = field(default_factory=list)
    recent_orders: list[OrderContribution] = field(default_factory=list)


class DashboardService:
    """Aggregates revenue across a creator's approved, linked posters."""

    def __init__(
        self,
        db: AsyncSession,
        aggregator: RevenueAggregator,
        normalizer: CurrencyNormalizer,
        commission_rate: Optional[float] = None,
    ):
        self.db = db
        self.aggregator = aggregator
        self.normalizer = normalizer
        self.commission_rate = settings.CREATOR_COMMISSION_RATE if commission_rate is None else commission_rate

    async def _creator_posters(self, creator_id: str) -> list[Poster]:
        result = await self.db.execute(
            select(Poster).where(Poster.creator_id == creator_id).order_by(Poster.created_at.desc())
        )
        return list(result.scalars().all())

    async def _rate(self, from_currency: str, to_currency: str) -> Decimal:
        try:
            return await self.normalizer.rate(from_currency, to_currency)
        except UnsupportedCurrencyError as e:
            logger.warning(f"Reporting unconverted amounts: {e}")
            return Decimal("1")

    async def _linked_revenue(
        self, posters: list[Poster], start_date: date, end_date: date, currency: str
    ) -> list[tuple[Poster, ProductRevenue, Decimal]]:
        """(poster, revenue, rate into ``currency``) for approved linked posters."""
        rows = []
        for poster in posters:
            if poster.status != "approved":
                continue
            product_id = numeric_product_id(poster.shopify_product_id)
            if not product_id:
                continue
            revenue = await self.aggregator.product_revenue(product_id, start_date, end_date, title=poster.title)
            rate = await self._rate(revenue.currency, currency) if revenue.revenue else Decimal("1")
            rows.append((poster, revenue, rate))
        return rows

    async def creator_stats(
        self, creator: User, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> CreatorStats:
        """Totals plus per-product figures, the distinct orders and a six month sales trend."""
        start_date = start_date or EARLIEST_DATE
        end_date = end_date or date.today()
        posters = await self._creator_posters(creator.uuid)

        stats = CreatorStats(
            currency=creator.currency,
            products_count=len(posters),
            approved_products_count=sum(1 for p in posters if p.status == "approved"),
        )
        trend = {key: TrendPoint(month=MONTHS[key[1] - 1], year=key[0]) for key in trailing_months(end_date)}
        orders: dict[str, OrderSummary] = {}
        linked: dict[str, tuple[ProductRevenue, Decimal]] = {}

        for poster, revenue, rate in await self._linked_revenue(posters, start_date, end_date, creator.currency):
            linked[poster.uuid] = (revenue, rate)
            stats.total_revenue += revenue.revenue * rate
            stats.total_sales += revenue.sales

            for contribution in revenue.contributions:
                converted = contribution.line_total * rate
                order = orders.get(contribution.order_id)
                if order is None:
                    order = orders[contribution.order_id] = OrderSummary(
                        order_id=contribution.order_id,
                        order_name=contribution.order_name,
                        date=contribution.date,
                    )
                order.quantity += contribution.quantity
                order.total += converted

                ordered = contribution_date(contribution)
                point = trend.get((ordered.year, ordered.month)) if ordered else None
                if point is not None:
                    point.sales += contribution.quantity
                    point.revenue += converted

        for poster in posters:
            summary = ProductSummary(
                poster_id=poster.uuid,
                title=poster.title,
                status=poster.status,
                product_id=numeric_product_id(poster.shopify_product_id),
                image=(poster.image_urls or [""])[0],
            )
            if poster.uuid in linked:
                revenue, rate = linked[poster.uuid]
                summary.sales_count = revenue.sales
                summary.revenue = (revenue.revenue * rate).quantize(Decimal("0.01"))
                summary.commission = commission_for(summary.revenue, self.commission_rate)
            stats.products.append(summary)

        for order in orders.values():
            order.total = order.total.quantize(Decimal("0.01"))
        stats.orders = sorted(orders.values(), key=lambda o: o.date, reverse=True)
        for point in trend.values():
            point.revenue = point.revenue.quantize(Decimal("0.01"))
        stats.sales_trend = list(trend.values())

        stats.total_revenue = stats.total_revenue.quantize(Decimal("0.01"))
        stats.total_commission = commission_for(stats.total_revenue, self.commission_rate)
        stats.orders_count = len(orders)
        if orders:
            stats.average_order_value = (stats.total_revenue / len(orders)).quantize(Decimal("0.01"))
        return stats

    async def creator_earnings(
        self,
        creator: User,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        year: Optional[int] = None,
    ) -> EarningsSummary:
        """Commission totals, a Jan-Dec chart for ``year`` and the top five posters by units sold."""
        if year and not start_date and not end_date:
            start_date, end_date = date(year, 1, 1), date(year, 12, 31)
        start_date = start_date or EARLIEST_DATE
        end_date = end_date or date.today()
        year = year or end_date.year

        posters = await self._creator_posters(creator.uuid)
        chart = [MonthlyPoint(month=name) for name in MONTHS]
        monthly_revenue: dict[int, Decimal] = defaultdict(lambda: ZERO)
        total_revenue = ZERO
        total_sales = 0
        top: list[TopPoster] = []

        for poster, revenue, rate in await self._linked_revenue(posters, start_date, end_date, creator.currency):
            converted = revenue.revenue * rate
            total_revenue += converted
            total_sales += revenue.sales
            if revenue.sales:
                top.append(TopPoster(
                    id=poster.uuid,
                    title=poster.title,
                    image=(poster.image_urls or [""])[0],
                    sales=revenue.sales,
                    revenue=converted.quantize(Decimal("0.01")),
                ))

            for contribution in revenue.contributions:
                ordered = contribution_date(contribution)
                if ordered is None or ordered.year != year:
                    continue
                monthly_revenue[ordered.month] += contribution.line_total * rate
                chart[ordered.month - 1].sales += contribution.quantity

        for month, amount in monthly_revenue.items():
            chart[month - 1].earnings = commission_for(amount, self.commission_rate)

        top.sort(key=lambda p: (-p.sales, p.title))
        return EarningsSummary(
            earnings=commission_for(total_revenue, self.commission_rate),
            sales=total_sales,
            commission=int(round(self.commission_rate * 100)),
            currency=creator.currency,
            year=year,
            chart=chart,
            top_selling_posters=top[:TOP_POSTERS_LIMIT],
        )

    async def product_stats(
        self,
        product_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        title: str = "",
        currency: Optional[str] = None,
    ) -> ProductStats:
        """Sales, revenue and commission of one Shopify product, all time by default."""
        start_date = start_date or EARLIEST_DATE
        end_date = end_date or date.today()
        revenue = await self.aggregator.product_revenue(product_id, start_date, end_date, title=title)

        target = currency or revenue.currency
        rate = await self._rate(revenue.currency, target) if revenue.revenue else Decimal("1")
        converted = (revenue.revenue * rate).quantize(Decimal("0.01"))
        recent = sorted(revenue.contributions, key=lambda c: c.date, reverse=True)

        return ProductStats(
            product_id=product_id,
            title=title,
            sales_count=revenue.sales,
            revenue=converted,
            commission=commission_for(converted, self.commission_rate),
            currency=target,
            variants=revenue.variants,
            recent_orders=recent[:RECENT_ORDERS_LIMIT],
        )


def get_dashboard_service(
    db: AsyncSession = Depends(get_db),
    aggregator: RevenueAggregator = Depends(get_revenue_aggregator),
    normalizer: CurrencyNormalizer = Depends(get_currency_normalizer),
) -> DashboardService:
    return DashboardService(db, aggregator, normalizer)
