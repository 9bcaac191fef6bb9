"""Catalog category model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field, model_validator

from pytienda.models._base import TiendaBaseModel


class Category(TiendaBaseModel):
    """A catalog category.

    Subcategories point at their parent through ``parent_id``; top-level
    categories leave it unset.
    """

    id: str
    name: str
    slug: str = ""
    description: str | None = None
    image: str | None = Field(default=None, validation_alias=AliasChoices("image", "imageUrl"))
    is_active: bool = True
    sort_order: int = Field(default=0, validation_alias=AliasChoices("sortOrder", "order", "sort_order"))
    parent_id: str | None = None
    product_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _unwrap_count(cls, values: Any) -> Any:
        """Lift Prisma's ``_count.products`` into ``productCount``."""
        if not isinstance(values, dict):
            return values
        count = values.get("_count")
        if isinstance(count, dict) and "productCount" not in values:
            products = count.get("products")
            if isinstance(products, int):
                return {**values, "productCount": products}
        return values

    @property
    def is_top_level(self) -> bool:
        return self.parent_id is None
