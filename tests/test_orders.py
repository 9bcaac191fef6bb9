from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from pytienda.exceptions import TiendaAuthenticationError
from pytienda.models.cart import CartItem
from pytienda.models.category import Category
from pytienda.models.order import OrderStatus
from pytienda.models.product import Product
from pytienda.models.user import User, UserRole
from pytienda.config import TiendaConfig
from pytienda.state.orders import OrderStore
from pytienda.storage import MemoryStorage
from pytienda.storefront import Storefront

_USER = User(id="u1", email="ana@example.com", name="Ana", role=UserRole.USER)


def _items() -> list[CartItem]:
    return [
        CartItem(product=Product(id="p1", name="Silla", price="120.50", image="silla.jpg"), quantity=2),
        CartItem(product=Product(id="p2", name="Mesa", price=300), quantity=1),
    ]


def _store() -> OrderStore:
    ids = iter(["order-1", "order-2"])
    return OrderStore(clock=lambda: datetime(2026, 1, 1, tzinfo=UTC), id_factory=lambda: next(ids))


def test_create_order_freezes_items_and_total() -> None:
    orders = _store()

    order = orders.create_order(_items(), _USER, shipping_address="Calle 1", phone="555")

    assert order.id == "order-1"
    assert order.status == OrderStatus.PENDING
    assert order.total_amount == Decimal("541.00")
    assert order.items[0].product_image == "silla.jpg"
    assert orders.get_user_orders("u1") == [order]


def test_create_order_requires_user_and_items() -> None:
    orders = _store()

    with pytest.raises(TiendaAuthenticationError):
        orders.create_order(_items(), None)
    with pytest.raises(ValueError):
        orders.create_order([], _USER)
    assert orders.get_all_orders() == []


def test_status_updates_and_cancel() -> None:
    orders = _store()
    order = orders.create_order(_items(), _USER)

    orders.update_order_status(order.id, "shipped")
    assert orders.get_order_by_id(order.id).status == OrderStatus.SHIPPED  # type: ignore[union-attr]

    orders.cancel_order(order.id)
    assert orders.get_order_by_id(order.id).status == OrderStatus.CANCELLED  # type: ignore[union-attr]

    orders.cancel_order("missing")
    assert len(orders.orders) == 1


class _StaticSource:
    async def fetch_categories(self) -> list[Category]:
        return [Category(id="1", name="Hogar")]

    async def fetch_products(self) -> list[Product]:
        return [Product(id="p1", name="Silla", price=100, category_id="1")]


@pytest.mark.asyncio
async def test_storefront_checkout_flow() -> None:
    storage = MemoryStorage()
    config = TiendaConfig(store_slug="tienda-ana")

    async with Storefront(config, storage=storage, source=_StaticSource()) as shop:
        assert shop.hydration.is_ready
        product = shop.catalog.get_product_by_id("p1")
        assert product is not None
        shop.cart.add_item(product)
        shop.cart.add_item(product)

        with pytest.raises(TiendaAuthenticationError):
            shop.checkout(shipping_address="Calle 1")
        assert shop.cart.get_total_items() == 2

        assert await shop.auth.login("admin@tienda.com", "admin123")
        order = shop.checkout(shipping_address="Calle 1")

    assert order.total_amount == 200
    assert shop.cart.items == ()
    assert "tienda-ana:cart-storage" in storage.keys()
