"""Cart line item model."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from pytienda.models.product import Product


class CartItem(BaseModel):
    """A product and the number of units of it in the cart."""

    model_config = ConfigDict(frozen=True)

    product: Product
    quantity: int = Field(ge=1)

    @property
    def subtotal(self) -> Decimal:
        return self.product.price * self.quantity
