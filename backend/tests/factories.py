"""Builders for Shopify order fixtures, users and posters used across tests."""
from decimal import Decimal
from typing import Optional

from app.auth.security import create_access_token, hash_password
from app.models.poster import Poster
from app.models.user import User
from app.services.shopify_client import LineItem, Order, OrdersPage


def make_line_item(
    product_id: str = "123",
    quantity: int = 1,
    discounted: Optional[str] = None,
    original: Optional[str] = None,
    variant_price: Optional[str] = None,
    variant_id: Optional[str] = "gid://shopify/ProductVariant/1",
    options: Optional[list] = None,
    item_id: str = "gid://shopify/LineItem/1",
) -> LineItem:
    return LineItem(
        id=item_id,
        title="Poster",
        quantity=quantity,
        product_id=f"gid://shopify/Product/{product_id}",
        variant_id=variant_id,
        variant_title="50x70",
        variant_price=Decimal(variant_price) if variant_price is not None else None,
        selected_options=options if options is not None else [("Size", "50x70")],
        discounted_total=Decimal(discounted) if discounted is not None else None,
        original_total=Decimal(original) if original is not None else None,
        currency_code="GBP",
    )


def make_order(
    order_id: str,
    status: str = "PAID",
    items: Optional[list] = None,
    currency: Optional[str] = "GBP",
    created_at: str = "2024-05-10T12:00:00Z",
) -> Order:
    return Order(
        id=f"gid://shopify/Order/{order_id}",
        name=f"#{order_id}",
        created_at=created_at,
        financial_status=status,
        currency_code=currency,
        line_items=items or [],
    )


class FakeOrderSource:
    """In-memory stand-in for ShopifyOrderSource.

    ``orders`` maps a numeric product id to its orders; they are served in
    pages of ``page_size`` with integer cursors.
    """

    def __init__(self, orders: Optional[dict] = None, page_size: int = 50, error: Optional[Exception] = None):
        self.orders = orders or {}
        self.page_size = page_size
        self.error = error
        self.queries: list[tuple[str, Optional[str]]] = []

    async def fetch_orders_page(self, query_string: str, cursor: Optional[str] = None) -> OrdersPage:
        self.queries.append((query_string, cursor))
        if self.error:
            raise self.error

        product_id = query_string.rsplit("line_items_product_id:", 1)[-1]
        orders = self.orders.get(product_id, [])
        start = int(cursor) if cursor else 0
        end = start + self.page_size
        has_next = end < len(orders)
        return OrdersPage(
            orders=orders[start:end],
            has_next_page=has_next,
            end_cursor=str(end) if has_next else None,
        )


async def create_user(
    db,
    email: str,
    name: str = "Test Creator",
    role: str = "creator",
    approved: bool = True,
    currency: str = "GBP",
    password: str = "Test1234a",
    **fields,
) -> User:
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        status="active",
        user_role=role,
        approved=approved,
        currency=currency,
        **fields,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def create_poster(
    db,
    creator: User,
    title: str = "Sunset",
    status: str = "approved",
    shopify_product_id: Optional[str] = "gid://shopify/Product/123",
    **fields,
) -> Poster:
    poster = Poster(
        title=title,
        status=status,
        shopify_product_id=shopify_product_id,
        creator_id=creator.uuid,
        selected_sizes=["50x70"],
        prices={"50x70": 25.0},
        **fields,
    )
    db.add(poster)
    await db.commit()
    await db.refresh(poster)
    return poster


def auth_headers(user: User) -> dict:
    token = create_access_token(data={"sub": user.uuid, "email": user.email, "role": user.user_role})
    return {"Authorization": f"Bearer {token}"}
