"""Client-side state stores.

Each store owns its in-memory state exclusively. Persisted stores write a
partialized snapshot of that state to a key-value storage adapter after
every mutation and replay it on startup.
"""

from pytienda.state.auth import AuthState, AuthStore, CredentialVerifier, StaticCredentialVerifier
from pytienda.state.base import PersistedStore, Store
from pytienda.state.cart import CartState, CartStore, total_items, total_price
from pytienda.state.catalog import CatalogState, CatalogStore
from pytienda.state.favorites import FavoritesState, FavoritesStore
from pytienda.state.orders import OrderState, OrderStore

__all__ = [
    "AuthState",
    "AuthStore",
    "CartState",
    "CartStore",
    "CatalogState",
    "CatalogStore",
    "CredentialVerifier",
    "FavoritesState",
    "FavoritesStore",
    "OrderState",
    "OrderStore",
    "PersistedStore",
    "StaticCredentialVerifier",
    "Store",
    "total_items",
    "total_price",
]
