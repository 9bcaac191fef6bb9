"""Favorites store."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict

from pytienda._constants import FAVORITES_STORAGE_KEY
from pytienda.models.product import Product
from pytienda.state.base import PersistedStore
from pytienda.storage import KeyValueStorage

_logger = logging.getLogger(__name__)


class FavoritesState(BaseModel):
    model_config = ConfigDict(frozen=True)

    favorites: tuple[Product, ...] = ()
    hydrated: bool = False


class FavoritesStore(PersistedStore[FavoritesState]):
    """Distinct products the shopper marked as favorite, keyed by id."""

    persisted_fields = frozenset({"favorites"})

    def __init__(self, *, storage: KeyValueStorage, key: str = FAVORITES_STORAGE_KEY) -> None:
        super().__init__(FavoritesState(), storage=storage, key=key)

    @property
    def favorites(self) -> tuple[Product, ...]:
        return self._state.favorites

    @property
    def count(self) -> int:
        return len(self._state.favorites)

    def add_to_favorites(self, product: Product) -> None:
        if self.is_favorite(product.id):
            return
        self._set(favorites=(*self._state.favorites, product))
        _logger.info("%s added to favorites", product.name)

    def remove_from_favorites(self, product_id: str) -> None:
        if not self.is_favorite(product_id):
            return
        self._set(favorites=tuple(fav for fav in self._state.favorites if fav.id != product_id))

    def is_favorite(self, product_id: str) -> bool:
        return any(fav.id == product_id for fav in self._state.favorites)

    def clear_favorites(self) -> None:
        self._set(favorites=())

    def _partialize(self) -> dict[str, Any]:
        return {"favorites": [product.to_wire() for product in self._state.favorites]}

    def _restore(self, snapshot: dict[str, Any]) -> dict[str, Any]:
        unique: dict[str, Product] = {}
        for entry in snapshot.get("favorites", []):
            product = Product.model_validate(entry)
            unique.setdefault(product.id, product)
        return {"favorites": tuple(unique.values())}

    def _empty(self) -> dict[str, Any]:
        return {"favorites": ()}
