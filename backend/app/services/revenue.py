"""Per-product revenue aggregation over Shopify orders.

Revenue for a product in a date range
-------------------------------------
1. Page through every order matching
   ``financial_status:any created_at:>=START created_at:<=END
   line_items_product_id:ID`` until ``hasNextPage`` is false.
2. Keep orders whose financial status contains ``PAID`` or ``COMPLETE`` and
   does not contain ``REFUND``. Refunded orders (including partially
   refunded ones) contribute nothing at all.
3. Keep line items whose product GID ends in the target numeric id.
4. Line revenue is the discounted total, else the original total, else
   ``variant price * quantity``. Shipping is never revenue.
5. Roll line items up per variant, recording every contributing order.

Fetch errors never propagate: the product reports zero so one broken
product cannot abort a payout batch.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from fastapi import Depends

from app.config import settings
from app.services.shopify_client import LineItem, Order, ShopifyOrderSource, get_order_source

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

DateLike = Union[date, str]


@dataclass
class OrderContribution:
    order_id: str
    order_name: str
    date: str
    quantity: int
    price_paid: Decimal
    line_total: Decimal


@dataclass
class VariantRevenue:
    variant_id: str
    title: str
    total_sold: int = 0
    total_revenue: Decimal = ZERO
    currency: str = ""
    orders: list[OrderContribution] = field(default_factory=list)


@dataclass
class ProductRevenue:
    product_id: str
    title: str = ""
    revenue: Decimal = ZERO
    sales: int = 0
    currency: str = ""
    variants: list[VariantRevenue] = field(default_factory=list)
    # Every matched line item, with or without a variant; used for
    # per-month charts and order counts.
    contributions: list[OrderContribution] = field(default_factory=list)

    @property
    def order_ids(self) -> set[str]:
        return {c.order_id for c in self.contributions}


def numeric_product_id(stored_id: Optional[str]) -> Optional[str]:
    """Trailing numeric segment of a stored product id.

    ``"gid://shopify/Product/123"`` and ``"123"`` both give ``"123"``.
    """
    if not stored_id:
        return None
    tail = stored_id.strip().rstrip("/").split("/")[-1]
    return tail or None


def is_paid_order(financial_status: Optional[str]) -> bool:
    """True for paid/complete orders that carry no refund."""
    status = (financial_status or "").upper()
    if "REFUND" in status:
        return False
    return "PAID" in status or "COMPLETE" in status


def line_item_revenue(item: LineItem) -> Optional[Decimal]:
    """Revenue of one line item, or None when it carries no price at all."""
    if item.discounted_total is not None:
        return item.discounted_total
    if item.original_total is not None:
        return item.original_total
    if item.variant_price is not None:
        return item.variant_price * item.quantity
    return None


def variant_title(item: LineItem) -> str:
    """``"Size: 50x70, Frame: Oak"`` from selected options, else the variant title."""
    options = ", ".join(f"{name}: {value}" for name, value in item.selected_options)
    return options or item.variant_title or "Default"


def build_orders_query(product_id: str, start_date: DateLike, end_date: DateLike) -> str:
    return (
        f"financial_status:any created_at:>={_iso(start_date)} "
        f"created_at:<={_iso(end_date)} line_items_product_id:{product_id}"
    )


def _iso(value: DateLike) -> str:
    return value.isoformat() if isinstance(value, date) else str(value)


class RevenueAggregator:
    """Sums paid line-item revenue for a single product over a date range."""

    def __init__(self, order_source: ShopifyOrderSource, default_currency: Optional[str] = None):
        self.order_source = order_source
        self.default_currency = default_currency or settings.DEFAULT_ORDER_CURRENCY

    async def product_revenue(
        self,
        product_id: str,
        start_date: DateLike,
        end_date: DateLike,
        title: str = "",
    ) -> ProductRevenue:
        """Aggregate revenue for ``product_id`` (numeric Shopify id)."""
        try:
            return await self._aggregate(product_id, start_date, end_date, title)
        except Exception as e:
            logger.error(f"Error calculating revenue for product {product_id}: {e}")
            return ProductRevenue(product_id=product_id, title=title, currency=self.default_currency)

    async def _aggregate(
        self, product_id: str, start_date: DateLike, end_date: DateLike, title: str
    ) -> ProductRevenue:
        query_string = build_orders_query(product_id, start_date, end_date)
        result = ProductRevenue(product_id=product_id, title=title)
        variants: dict[str, VariantRevenue] = {}
        currency: Optional[str] = None
        included = excluded = 0

        cursor = None
        has_next_page = True
        while has_next_page:
            page = await self.order_source.fetch_orders_page(query_string, cursor)

            for order in page.orders:
                if currency is None and order.currency_code:
                    currency = order.currency_code

                if not is_paid_order(order.financial_status):
                    excluded += 1
                    logger.debug(f"Skipping order {order.name} with status {order.financial_status}")
                    continue
                included += 1
                self._add_order(result, variants, order, product_id, currency or self.default_currency)

            has_next_page = page.has_next_page and bool(page.end_cursor)
            cursor = page.end_cursor

        result.currency = currency or self.default_currency
        result.variants = list(variants.values())

        logger.info(
            f"Product {product_id}: {result.sales} sold, revenue {result.revenue:.2f} {result.currency} "
            f"({included} orders included, {excluded} excluded)"
        )
        return result

    def _add_order(
        self,
        result: ProductRevenue,
        variants: dict[str, VariantRevenue],
        order: Order,
        product_id: str,
        currency: str,
    ) -> None:
        for item in order.line_items:
            if numeric_product_id(item.product_id) != product_id:
                continue

            line_total = line_item_revenue(item)
            if line_total is None:
                logger.warning(f"No price information for item {item.id} in order {order.name}")
                continue

            quantity = item.quantity
            unit_price = line_total / quantity if quantity > 0 else ZERO
            contribution = OrderContribution(
                order_id=order.id,
                order_name=order.name,
                date=order.created_at,
                quantity=quantity,
                price_paid=unit_price,
                line_total=line_total,
            )

            result.sales += quantity
            result.revenue += line_total
            result.contributions.append(contribution)

            if item.variant_id:
                variant = variants.get(item.variant_id)
                if variant is None:
                    variant = VariantRevenue(
                        variant_id=item.variant_id,
                        title=variant_title(item),
                        currency=item.currency_code or currency,
                    )
                    variants[item.variant_id] = variant
                variant.total_sold += quantity
                variant.total_revenue += line_total
                variant.orders.append(contribution)


def get_revenue_aggregator(
    order_source: ShopifyOrderSource = Depends(get_order_source),
) -> RevenueAggregator:
    """Dependency providing an aggregator over the configured Shopify store."""
    return RevenueAggregator(order_source)
