"""Order ledger built from cart contents at checkout."""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from pytienda.exceptions import TiendaAuthenticationError
from pytienda.models.cart import CartItem
from pytienda.models.order import Order, OrderItem, OrderStatus
from pytienda.models.user import User
from pytienda.state.base import Store

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _new_order_id() -> str:
    return f"order_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


class OrderState(BaseModel):
    model_config = ConfigDict(frozen=True)

    orders: tuple[Order, ...] = ()


class OrderStore(Store[OrderState]):
    """In-memory orders, newest last."""

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_order_id,
    ) -> None:
        super().__init__(OrderState())
        self._clock = clock
        self._id_factory = id_factory

    @property
    def orders(self) -> tuple[Order, ...]:
        return self._state.orders

    def create_order(
        self,
        items: Iterable[CartItem],
        user: User | None,
        *,
        shipping_address: str = "",
        phone: str = "",
        notes: str | None = None,
    ) -> Order:
        """Freeze *items* into a pending order for *user*.

        Raises
        ------
        TiendaAuthenticationError
            No user is logged in.
        ValueError
            *items* is empty.
        """
        if user is None:
            raise TiendaAuthenticationError("Cannot place an order without an authenticated user")

        order_items = tuple(
            OrderItem(
                product_id=item.product.id,
                product_name=item.product.name,
                product_image=item.product.image,
                price=item.product.price,
                quantity=item.quantity,
            )
            for item in items
        )
        if not order_items:
            raise ValueError("Cannot place an order with no items")

        now = self._clock()
        order = Order(
            id=self._id_factory(),
            user_id=user.id,
            user_email=user.email,
            user_name=user.name,
            items=order_items,
            total_amount=sum((item.subtotal for item in order_items), Decimal(0)),
            created_at=now,
            updated_at=now,
            shipping_address=shipping_address,
            phone=phone,
            notes=notes,
        )
        self._set(orders=(*self._state.orders, order))
        _logger.info("Order %s created for %s (%d items)", order.id, user.email, len(order_items))
        return order

    def get_user_orders(self, user_id: str) -> list[Order]:
        return [order for order in self._state.orders if order.user_id == user_id]

    def get_all_orders(self) -> list[Order]:
        return list(self._state.orders)

    def get_order_by_id(self, order_id: str) -> Order | None:
        return next((order for order in self._state.orders if order.id == order_id), None)

    def update_order_status(self, order_id: str, status: OrderStatus | str) -> None:
        status = OrderStatus(status)
        if self.get_order_by_id(order_id) is None:
            return
        now = self._clock()
        self._set(
            orders=tuple(
                order.model_copy(update={"status": status, "updated_at": now}) if order.id == order_id else order
                for order in self._state.orders
            )
        )
        _logger.info("Order %s is now %s", order_id, status)

    def cancel_order(self, order_id: str) -> None:
        self.update_order_status(order_id, OrderStatus.CANCELLED)
