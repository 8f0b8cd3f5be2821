"""Shopify Admin GraphQL client for order lookups.

Only the read side the reporting code needs is implemented: a single page of
orders matching a Shopify search query, parsed into plain dataclasses so the
aggregation code never touches raw GraphQL payloads.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import httpx

from app.config import settings

logger = logging.getLogger(__name__)


ORDERS_QUERY = """
query getOrdersByProductId($cursor: String, $queryString: String!, $first: Int!, $lineItems: Int!) {
  orders(first: $first, query: $queryString, after: $cursor) {
    edges {
      node {
        id
        name
        createdAt
        displayFinancialStatus
        totalPriceSet { shopMoney { amount currencyCode } }
        totalShippingPriceSet { shopMoney { amount currencyCode } }
        lineItems(first: $lineItems) {
          edges {
            node {
              id
              title
              quantity
              product { id title }
              variant {
                id
                title
                price
                selectedOptions { name value }
              }
              discountedTotalSet { shopMoney { amount currencyCode } }
              originalTotalSet { shopMoney { amount currencyCode } }
            }
          }
        }
      }
    }
    pageInfo { hasNextPage endCursor }
  }
}
"""


class ShopifyAPIError(Exception):
    """Raised when the Shopify API cannot be reached or returns errors."""


@dataclass
class LineItem:
    id: str
    title: str
    quantity: int
    product_id: Optional[str] = None
    variant_id: Optional[str] = None
    variant_title: Optional[str] = None
    variant_price: Optional[Decimal] = None
    selected_options: list[tuple[str, str]] = field(default_factory=list)
    discounted_total: Optional[Decimal] = None
    original_total: Optional[Decimal] = None
    currency_code: Optional[str] = None


@dataclass
class Order:
    id: str
    name: str
    created_at: str
    financial_status: str
    currency_code: Optional[str] = None
    line_items: list[LineItem] = field(default_factory=list)
    shipping_amount: Decimal = Decimal("0")


@dataclass
class OrdersPage:
    orders: list[Order]
    has_next_page: bool = False
    end_cursor: Optional[str] = None


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _money(money_set: Optional[dict]) -> tuple[Optional[Decimal], Optional[str]]:
    """Return (amount, currency) from a ``{"shopMoney": {...}}`` MoneyBag."""
    shop_money = (money_set or {}).get("shopMoney") or {}
    return _decimal(shop_money.get("amount")), shop_money.get("currencyCode")


def parse_line_item(node: dict) -> LineItem:
    product = node.get("product") or {}
    variant = node.get("variant") or {}
    discounted, discounted_currency = _money(node.get("discountedTotalSet"))
    original, original_currency = _money(node.get("originalTotalSet"))

    options = []
    for option in variant.get("selectedOptions") or []:
        if option and isinstance(option.get("name"), str) and isinstance(option.get("value"), str):
            options.append((option["name"], option["value"]))

    return LineItem(
        id=node.get("id", ""),
        title=node.get("title") or "",
        quantity=int(node.get("quantity") or 0),
        product_id=product.get("id"),
        variant_id=variant.get("id"),
        variant_title=variant.get("title"),
        variant_price=_decimal(variant.get("price")),
        selected_options=options,
        discounted_total=discounted,
        original_total=original,
        currency_code=discounted_currency or original_currency,
    )


def parse_order(node: dict) -> Order:
    _, currency = _money(node.get("totalPriceSet"))
    shipping, _ = _money(node.get("totalShippingPriceSet"))
    line_items = [
        parse_line_item(edge["node"])
        for edge in (node.get("lineItems") or {}).get("edges", [])
        if edge.get("node")
    ]
    return Order(
        id=node.get("id", ""),
        name=node.get("name") or node.get("id", ""),
        created_at=node.get("createdAt") or "",
        financial_status=node.get("displayFinancialStatus") or "",
        currency_code=currency,
        line_items=line_items,
        shipping_amount=shipping or Decimal("0"),
    )


def parse_orders_page(body: dict) -> OrdersPage:
    """Parse a GraphQL response body into an OrdersPage.

    A body without ``data.orders`` is treated as an empty last page.
    """
    if body.get("errors"):
        messages = "; ".join(e.get("message", "unknown error") for e in body["errors"])
        raise ShopifyAPIError(f"Shopify GraphQL errors: {messages}")

    orders = ((body.get("data") or {}).get("orders")) or {}
    page_info = orders.get("pageInfo") or {}
    return OrdersPage(
        orders=[parse_order(edge["node"]) for edge in orders.get("edges", []) if edge.get("node")],
        has_next_page=bool(page_info.get("hasNextPage")),
        end_cursor=page_info.get("endCursor"),
    )


class ShopifyOrderSource:
    """Paginated order search over the Shopify Admin GraphQL API."""

    def __init__(
        self,
        store_domain: Optional[str] = None,
        access_token: Optional[str] = None,
        api_version: Optional[str] = None,
        page_size: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.store_domain = store_domain if store_domain is not None else settings.SHOPIFY_STORE_DOMAIN
        self.access_token = access_token if access_token is not None else settings.SHOPIFY_ACCESS_TOKEN
        self.api_version = api_version or settings.SHOPIFY_API_VERSION
        self.page_size = page_size or settings.SHOPIFY_ORDERS_PAGE_SIZE
        self.timeout = timeout or settings.SHOPIFY_TIMEOUT_SECONDS
        self.transport = transport

    @property
    def graphql_url(self) -> str:
        return f"https://{self.store_domain}/admin/api/{self.api_version}/graphql.json"

    async def fetch_orders_page(self, query_string: str, cursor: Optional[str] = None) -> OrdersPage:
        """Fetch one page of orders matching a Shopify search query."""
        if not self.store_domain or not self.access_token:
            raise ShopifyAPIError("Shopify store domain or access token not configured")

        payload = {
            "query": ORDERS_QUERY,
            "variables": {
                "cursor": cursor,
                "queryString": query_string,
                "first": self.page_size,
                "lineItems": settings.SHOPIFY_LINE_ITEMS_PAGE_SIZE,
            },
        }
        headers = {
            "X-Shopify-Access-Token": self.access_token,
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.graphql_url, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ShopifyAPIError(f"Shopify request failed: {e}") from e

        return parse_orders_page(response.json())


def get_order_source() -> ShopifyOrderSource:
    """Dependency providing the configured order source."""
    return ShopifyOrderSource()
