"""Shopping cart store."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict

from pytienda._constants import CART_STORAGE_KEY
from pytienda.models.cart import CartItem
from pytienda.models.product import Product
from pytienda.state.base import PersistedStore
from pytienda.storage import KeyValueStorage

_logger = logging.getLogger(__name__)


class CartState(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: tuple[CartItem, ...] = ()
    hydrated: bool = False


def total_items(state: CartState) -> int:
    """Selector: sum of quantities."""
    return sum(item.quantity for item in state.items)


def total_price(state: CartState) -> Decimal | int:
    """Selector: sum of ``quantity × price`` (``0`` for an empty cart)."""
    return sum((item.quantity * item.product.price for item in state.items), 0)


class CartStore(PersistedStore[CartState]):
    """Ordered list of products and quantities.

    At most one line exists per product id; lines keep their insertion
    order. Quantities are always positive: setting a quantity to zero or
    less removes the line. Operations on absent product ids are no-ops.

    With ``enforce_stock`` enabled, :meth:`add_item` and
    :meth:`update_quantity` refuse quantities above the product's stock
    count and return ``False``.
    """

    persisted_fields = frozenset({"items"})

    def __init__(
        self,
        *,
        storage: KeyValueStorage,
        key: str = CART_STORAGE_KEY,
        enforce_stock: bool = False,
    ) -> None:
        super().__init__(CartState(), storage=storage, key=key)
        self._enforce_stock = enforce_stock

    @property
    def items(self) -> tuple[CartItem, ...]:
        return self._state.items

    def _find(self, product_id: str) -> CartItem | None:
        for item in self._state.items:
            if item.product.id == product_id:
                return item
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_item(self, product: Product) -> bool:
        """Add one unit of *product*, appending a new line if needed."""
        existing = self._find(product.id)
        requested = (existing.quantity if existing else 0) + 1

        if self._enforce_stock and not self.validate_stock(product, requested):
            _logger.warning(
                "Insufficient stock for %s: %d available",
                product.name,
                self.available_stock(product),
            )
            return False

        if existing is not None:
            items = tuple(
                item.model_copy(update={"quantity": requested}) if item.product.id == product.id else item
                for item in self._state.items
            )
            _logger.info("%s added (quantity %d)", product.name, requested)
        else:
            items = (*self._state.items, CartItem(product=product, quantity=1))
            _logger.info("%s added to cart", product.name)
        self._set(items=items)
        return True

    def remove_item(self, product_id: str) -> None:
        """Remove the line for *product_id*, if any."""
        existing = self._find(product_id)
        if existing is None:
            return
        self._set(items=tuple(item for item in self._state.items if item.product.id != product_id))
        _logger.info("%s removed from cart", existing.product.name)

    def update_quantity(self, product_id: str, quantity: int) -> bool:
        """Set the quantity of a line in place; ``quantity <= 0`` removes it.

        Returns ``False`` when no line exists for *product_id*.
        """
        existing = self._find(product_id)
        if existing is None:
            return False

        if quantity <= 0:
            self.remove_item(product_id)
            return True

        if self._enforce_stock and not self.validate_stock(existing.product, quantity):
            _logger.warning(
                "Insufficient stock for %s: %d available",
                existing.product.name,
                self.available_stock(existing.product),
            )
            return False

        self._set(
            items=tuple(
                item.model_copy(update={"quantity": quantity}) if item.product.id == product_id else item
                for item in self._state.items
            )
        )
        _logger.info("%s quantity set to %d", existing.product.name, quantity)
        return True

    def clear_cart(self) -> None:
        count = len(self._state.items)
        self._set(items=())
        if count:
            _logger.info("Cart cleared (%d products removed)", count)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def get_total_items(self) -> int:
        return total_items(self._state)

    def get_total_price(self) -> Decimal | int:
        return total_price(self._state)

    @staticmethod
    def available_stock(product: Product) -> int:
        """Units of *product* available (``0`` when unknown)."""
        return product.stock or 0

    @classmethod
    def validate_stock(cls, product: Product, requested_quantity: int) -> bool:
        return requested_quantity <= cls.available_stock(product)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _partialize(self) -> dict[str, Any]:
        return {
            "items": [{"product": item.product.to_wire(), "quantity": item.quantity} for item in self._state.items],
        }

    def _restore(self, snapshot: dict[str, Any]) -> dict[str, Any]:
        merged: dict[str, CartItem] = {}
        for entry in snapshot.get("items", []):
            item = CartItem.model_validate(
                {"product": Product.model_validate(entry["product"]), "quantity": entry["quantity"]}
            )
            previous = merged.get(item.product.id)
            if previous is not None:
                # Merge duplicate lines into one.
                item = item.model_copy(update={"quantity": previous.quantity + item.quantity})
            merged[item.product.id] = item
        return {"items": tuple(merged.values())}

    def _empty(self) -> dict[str, Any]:
        return {"items": ()}
