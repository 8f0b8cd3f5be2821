"""Tests for per-product revenue aggregation."""
from datetime import date
from decimal import Decimal

import pytest

from app.services.revenue import (
    RevenueAggregator,
    build_orders_query,
    is_paid_order,
    line_item_revenue,
    numeric_product_id,
    variant_title,
)
from app.services.shopify_client import ShopifyAPIError

from factories import FakeOrderSource, make_line_item, make_order

MAY_START = date(2024, 5, 1)
MAY_END = date(2024, 5, 31)


def test_numeric_product_id():
    assert numeric_product_id("gid://shopify/Product/123") == "123"
    assert numeric_product_id("123") == "123"
    assert numeric_product_id("") is None
    assert numeric_product_id(None) is None


def test_is_paid_order():
    assert is_paid_order("PAID")
    assert is_paid_order("partially_paid")
    assert is_paid_order("COMPLETE")
    assert not is_paid_order("REFUNDED")
    assert not is_paid_order("PARTIALLY_REFUNDED")
    assert not is_paid_order("PAID_REFUNDED")
    assert not is_paid_order("paid, refunded")
    assert not is_paid_order("PENDING")
    assert not is_paid_order(None)


def test_line_item_revenue_fallback_order():
    assert line_item_revenue(make_line_item(quantity=2, discounted="18.00", original="20.00")) == Decimal("18.00")
    assert line_item_revenue(make_line_item(quantity=2, original="20.00", variant_price="11.00")) == Decimal("20.00")
    assert line_item_revenue(make_line_item(quantity=3, variant_price="10.00")) == Decimal("30.00")
    assert line_item_revenue(make_line_item(quantity=3)) is None


def test_variant_title():
    assert variant_title(make_line_item(options=[("Size", "50x70"), ("Frame", "Oak")])) == "Size: 50x70, Frame: Oak"
    assert variant_title(make_line_item(options=[])) == "50x70"


def test_build_orders_query():
    query = build_orders_query("123", MAY_START, MAY_END)
    assert query == (
        "financial_status:any created_at:>=2024-05-01 created_at:<=2024-05-31 line_items_product_id:123"
    )


@pytest.mark.asyncio
async def test_refunded_order_excluded_entirely():
    """A paid order counts; a refunded order contributes nothing."""
    source = FakeOrderSource({
        "123": [
            make_order("A", "PAID", [make_line_item(quantity=2, discounted="18.00", variant_price="10.00")]),
            make_order("B", "REFUNDED", [make_line_item(quantity=1, variant_price="10.00")]),
        ]
    })

    result = await RevenueAggregator(source).product_revenue("123", MAY_START, MAY_END)

    assert result.revenue == Decimal("18.00")
    assert result.sales == 2
    assert result.order_ids == {"gid://shopify/Order/A"}


@pytest.mark.asyncio
async def test_paid_and_refunded_status_excluded():
    source = FakeOrderSource({
        "123": [make_order("A", "PARTIALLY_REFUNDED", [make_line_item(quantity=1, discounted="10.00")])]
    })

    result = await RevenueAggregator(source).product_revenue("123", MAY_START, MAY_END)

    assert result.revenue == Decimal("0")
    assert result.sales == 0


@pytest.mark.asyncio
async def test_paid_status_with_refund_marker_excluded():
    """Test a status naming both paid and refund counts as refunded."""
    source = FakeOrderSource({
        "123": [
            make_order("A", "PAID", [make_line_item(quantity=1, discounted="10.00")]),
            make_order("B", "PAID_REFUNDED", [make_line_item(quantity=4, discounted="40.00")]),
            make_order("C", "paid, refunded", [make_line_item(quantity=2, discounted="20.00")]),
        ]
    })

    result = await RevenueAggregator(source).product_revenue("123", MAY_START, MAY_END)

    assert result.revenue == Decimal("10.00")
    assert result.sales == 1
    assert result.order_ids == {"gid://shopify/Order/A"}


@pytest.mark.asyncio
async def test_only_matching_product_line_items_count():
    source = FakeOrderSource({
        "123": [
            make_order("A", "PAID", [
                make_line_item(product_id="123", quantity=1, discounted="10.00"),
                make_line_item(product_id="999", quantity=5, discounted="100.00"),
            ])
        ]
    })

    result = await RevenueAggregator(source).product_revenue("123", MAY_START, MAY_END)

    assert result.revenue == Decimal("10.00")
    assert result.sales == 1


@pytest.mark.asyncio
async def test_follows_pagination():
    orders = [
        make_order(str(n), "PAID", [make_line_item(quantity=1, discounted="5.00")])
        for n in range(5)
    ]
    source = FakeOrderSource({"123": orders}, page_size=2)

    result = await RevenueAggregator(source).product_revenue("123", MAY_START, MAY_END)

    assert result.sales == 5
    assert result.revenue == Decimal("25.00")
    assert [cursor for _, cursor in source.queries] == [None, "2", "4"]


@pytest.mark.asyncio
async def test_variant_breakdown():
    source = FakeOrderSource({
        "123": [
            make_order("A", "PAID", [make_line_item(quantity=2, discounted="40.00")]),
            make_order("B", "PAID", [make_line_item(
                quantity=1, discounted="30.00",
                variant_id="gid://shopify/ProductVariant/2", options=[("Size", "70x100")],
            )]),
            make_order("C", "PAID", [make_line_item(quantity=1, original="20.00")]),
        ]
    })

    result = await RevenueAggregator(source).product_revenue("123", MAY_START, MAY_END)

    variants = {v.variant_id: v for v in result.variants}
    standard = variants["gid://shopify/ProductVariant/1"]
    assert standard.title == "Size: 50x70"
    assert standard.total_sold == 3
    assert standard.total_revenue == Decimal("60.00")
    assert [o.order_name for o in standard.orders] == ["#A", "#C"]
    assert standard.orders[0].price_paid == Decimal("20.00")
    assert variants["gid://shopify/ProductVariant/2"].total_revenue == Decimal("30.00")


@pytest.mark.asyncio
async def test_currency_from_first_order_that_reports_one():
    source = FakeOrderSource({
        "123": [
            make_order("A", "PAID", [make_line_item(discounted="10.00")], currency=None),
            make_order("B", "PAID", [make_line_item(discounted="10.00")], currency="DKK"),
        ]
    })

    result = await RevenueAggregator(source).product_revenue("123", MAY_START, MAY_END)

    assert result.currency == "DKK"


@pytest.mark.asyncio
async def test_defaults_currency_without_orders():
    result = await RevenueAggregator(FakeOrderSource()).product_revenue("123", MAY_START, MAY_END)

    assert result.currency == "EUR"
    assert result.revenue == Decimal("0")
    assert result.variants == []


@pytest.mark.asyncio
async def test_fetch_error_returns_zero():
    source = FakeOrderSource(error=ShopifyAPIError("boom"))

    result = await RevenueAggregator(source).product_revenue("123", MAY_START, MAY_END, title="Sunset")

    assert result.revenue == Decimal("0")
    assert result.sales == 0
    assert result.title == "Sunset"
