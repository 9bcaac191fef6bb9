"""Catalog cache: categories and products loaded at startup.

Besides the read-side queries used by the storefront, the store carries the
admin console's catalog edits (add, update, delete, toggle, reorder). Edits
only touch the in-memory copy.
"""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict

from pytienda.models._base import TiendaBaseModel
from pytienda.models.category import Category
from pytienda.models.product import Product
from pytienda.slug import unique_slug
from pytienda.state.base import Store

_logger = logging.getLogger(__name__)

M = TypeVar("M", bound=TiendaBaseModel)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _new_catalog_id() -> str:
    return f"{int(time.time() * 1000)}{secrets.token_hex(3)}"


def _revise(model: M, changes: dict[str, Any]) -> M:
    """Re-validate *model* with *changes* applied, rejecting unknown fields."""
    cls = type(model)
    unknown = (set(changes) - set(cls.model_fields)) | (set(changes) & {"id", "raw"})
    if unknown:
        raise ValueError(f"Cannot update {cls.__name__} fields: {', '.join(sorted(unknown))}")
    return cls.model_validate({**model.model_dump(), **changes})


class CatalogState(BaseModel):
    model_config = ConfigDict(frozen=True)

    categories: tuple[Category, ...] = ()
    products: tuple[Product, ...] = ()
    loaded: bool = False
    error: str | None = None


def _by_sort_order(categories: Iterable[Category]) -> list[Category]:
    return sorted(categories, key=lambda category: category.sort_order)


class CatalogStore(Store[CatalogState]):
    """Read-mostly view over the storefront catalog.

    Not persisted: the catalog is refetched on every start. Edits on absent
    ids are no-ops.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_catalog_id,
    ) -> None:
        super().__init__(CatalogState())
        self._clock = clock
        self._id_factory = id_factory

    @property
    def categories(self) -> tuple[Category, ...]:
        return self._state.categories

    @property
    def products(self) -> tuple[Product, ...]:
        return self._state.products

    def set_categories(self, categories: Iterable[Category]) -> None:
        self._set(categories=tuple(_by_sort_order(categories)))

    def set_products(self, products: Iterable[Product]) -> None:
        self._set(products=tuple(products))

    def mark_loaded(self, error: str | None = None) -> None:
        self._set(loaded=True, error=error)

    def clear_error(self) -> None:
        self._set(error=None)

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def get_category_by_id(self, category_id: str) -> Category | None:
        return next((c for c in self._state.categories if c.id == category_id), None)

    def get_category_by_slug(self, slug: str) -> Category | None:
        return next((c for c in self._state.categories if c.slug == slug), None)

    def get_active_categories(self) -> list[Category]:
        return [c for c in self._state.categories if c.is_active]

    def get_parent_categories(self) -> list[Category]:
        """Active top-level categories."""
        return [c for c in self._state.categories if c.is_active and c.is_top_level]

    def get_child_categories(self, parent_id: str) -> list[Category]:
        return [c for c in self._state.categories if c.is_active and c.parent_id == parent_id]

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def get_product_by_id(self, product_id: str) -> Product | None:
        return next((p for p in self._state.products if p.id == product_id), None)

    def get_products_by_category(self, category_id: str) -> list[Product]:
        return [p for p in self._state.products if p.category_id == category_id]

    def get_active_products(self) -> list[Product]:
        return [p for p in self._state.products if p.in_stock]

    def get_promotional_products(self) -> list[Product]:
        return [p for p in self._state.products if p.has_promotion]

    def search_products(self, query: str) -> list[Product]:
        """Case-insensitive substring match on name, description and category."""
        needle = query.strip().lower()
        if not needle:
            return list(self._state.products)
        return [
            p
            for p in self._state.products
            if needle in p.name.lower() or needle in p.description.lower() or needle in p.category.lower()
        ]

    # ------------------------------------------------------------------
    # Admin: categories
    # ------------------------------------------------------------------

    def add_category(
        self,
        name: str,
        *,
        slug: str | None = None,
        description: str | None = None,
        image: str | None = None,
        is_active: bool = True,
        sort_order: int | None = None,
        parent_id: str | None = None,
    ) -> Category:
        """Create a category; the slug defaults to a unique slug of *name*.

        *sort_order* defaults to the end of the list.
        """
        now = self._clock()
        categories = self._state.categories
        category = Category(
            id=self._id_factory(),
            name=name,
            slug=slug or unique_slug(name, {c.slug for c in categories}),
            description=description,
            image=image,
            is_active=is_active,
            sort_order=len(categories) + 1 if sort_order is None else sort_order,
            parent_id=parent_id,
            created_at=now,
            updated_at=now,
        )
        self._set(categories=tuple(_by_sort_order((*categories, category))))
        _logger.info("Category %s created (%s)", category.name, category.slug)
        return category

    def update_category(self, category_id: str, **changes: Any) -> Category | None:
        """Apply field *changes* to a category and stamp ``updated_at``.

        Raises
        ------
        ValueError
            *changes* names ``id`` or a field categories do not have.
        """
        existing = self.get_category_by_id(category_id)
        if existing is None:
            return None
        updated = _revise(existing, {**changes, "updated_at": self._clock()})
        self._set(
            categories=tuple(
                _by_sort_order(updated if c.id == category_id else c for c in self._state.categories)
            )
        )
        _logger.info("Category %s updated", updated.name)
        return updated

    def delete_category(self, category_id: str) -> None:
        """Remove a category together with its direct subcategories."""
        existing = self.get_category_by_id(category_id)
        if existing is None:
            return
        kept = tuple(c for c in self._state.categories if c.id != category_id and c.parent_id != category_id)
        removed = len(self._state.categories) - len(kept)
        self._set(categories=kept)
        _logger.info("Category %s deleted (%d removed)", existing.name, removed)

    def toggle_category_status(self, category_id: str) -> None:
        existing = self.get_category_by_id(category_id)
        if existing is None:
            return
        self.update_category(category_id, is_active=not existing.is_active)

    def activate_all_categories(self) -> None:
        now = self._clock()
        self._set(
            categories=tuple(_revise(c, {"is_active": True, "updated_at": now}) for c in self._state.categories)
        )

    def reorder_categories(self, category_ids: Sequence[str]) -> None:
        """Renumber ``sort_order`` from 1 following *category_ids*.

        Unknown ids are ignored; categories left out keep their relative
        order after the listed ones.
        """
        by_id = {c.id: c for c in self._state.categories}
        listed = [by_id[cid] for cid in dict.fromkeys(category_ids) if cid in by_id]
        listed_ids = {c.id for c in listed}
        ordered = listed + [c for c in self._state.categories if c.id not in listed_ids]
        now = self._clock()
        self._set(
            categories=tuple(
                _revise(category, {"sort_order": index, "updated_at": now})
                for index, category in enumerate(ordered, start=1)
            )
        )

    # ------------------------------------------------------------------
    # Admin: products
    # ------------------------------------------------------------------

    def add_product(self, product: Product) -> Product:
        """Append *product*, filling its category name from ``category_id``.

        Raises
        ------
        ValueError
            A product with the same id already exists.
        """
        if self.get_product_by_id(product.id) is not None:
            raise ValueError(f"Product {product.id} already exists")
        if not product.category and product.category_id is not None:
            category = self.get_category_by_id(product.category_id)
            if category is not None:
                product = _revise(product, {"category": category.name})
        if product.created_at is None:
            product = _revise(product, {"created_at": self._clock()})
        self._set(products=(*self._state.products, product))
        _logger.info("Product %s added", product.name)
        return product

    def update_product(self, product_id: str, **changes: Any) -> Product | None:
        """Apply field *changes* to a product in place.

        Raises
        ------
        ValueError
            *changes* names ``id`` or a field products do not have.
        """
        existing = self.get_product_by_id(product_id)
        if existing is None:
            return None
        updated = _revise(existing, changes)
        self._set(products=tuple(updated if p.id == product_id else p for p in self._state.products))
        _logger.info("Product %s updated", updated.name)
        return updated

    def delete_product(self, product_id: str) -> None:
        existing = self.get_product_by_id(product_id)
        if existing is None:
            return
        self._set(products=tuple(p for p in self._state.products if p.id != product_id))
        _logger.info("Product %s deleted", existing.name)

    def toggle_product_status(self, product_id: str) -> None:
        """Flip ``in_stock`` for a product."""
        existing = self.get_product_by_id(product_id)
        if existing is None:
            return
        self.update_product(product_id, in_stock=not existing.in_stock)
