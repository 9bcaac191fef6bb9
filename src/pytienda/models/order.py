"""Order models."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class OrderStatus(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderItem(BaseModel):
    """Product snapshot frozen into an order at checkout time."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    product_name: str
    product_image: str = ""
    price: Decimal
    quantity: int = Field(ge=1)

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


class Order(BaseModel):
    """A placed order."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    user_email: str
    user_name: str
    items: tuple[OrderItem, ...]
    total_amount: Decimal
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    shipping_address: str = ""
    phone: str = ""
    notes: str | None = None
