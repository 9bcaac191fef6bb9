"""Data models for the storefront catalog and client-side state."""

from pytienda.models._base import Money, TiendaBaseModel, parse_money
from pytienda.models.cart import CartItem
from pytienda.models.category import Category
from pytienda.models.order import Order, OrderItem, OrderStatus
from pytienda.models.product import Product
from pytienda.models.user import User, UserRole

__all__ = [
    "CartItem",
    "Category",
    "Money",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Product",
    "TiendaBaseModel",
    "User",
    "UserRole",
    "parse_money",
]
