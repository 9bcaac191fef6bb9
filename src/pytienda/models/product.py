"""Catalog product model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field, model_validator

from pytienda.models._base import Money, TiendaBaseModel


class Product(TiendaBaseModel):
    """A catalog product.

    Treated as an opaque, immutable value by the client-side stores; only
    ``id`` and ``price`` take part in cart and favorites logic.

    The storefront API is not uniform about field names (the admin mock data
    uses ``originalPrice``/``quantity``, the database routes use
    ``comparePrice``/``stock``), so the ambiguous fields accept both.
    """

    id: str
    name: str
    price: Money
    category: str = ""
    category_id: str | None = None
    original_price: Money | None = Field(
        default=None,
        validation_alias=AliasChoices("originalPrice", "comparePrice", "original_price"),
    )
    image: str = ""
    description: str = ""
    in_stock: bool = Field(
        default=True,
        validation_alias=AliasChoices("inStock", "isActive", "in_stock"),
    )
    stock: int | None = Field(
        default=None,
        validation_alias=AliasChoices("stock", "quantity"),
    )
    """Units available (the original payloads call this ``quantity``)."""
    rating: float | None = None
    reviews: int | None = None
    free_shipping: bool = False
    has_promotion: bool = Field(
        default=False,
        validation_alias=AliasChoices("hasPromotion", "isPromotion", "has_promotion"),
    )
    promotion_percentage: float | None = None
    promotion_start_date: datetime | None = None
    promotion_end_date: datetime | None = None
    created_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_relations(cls, values: Any) -> Any:
        """Flatten the nested ``category`` object and ``images`` list."""
        if not isinstance(values, dict):
            return values
        working = dict(values)

        category = working.get("category")
        if isinstance(category, dict):
            working["category"] = category.get("name") or ""
            if working.get("categoryId") is None and category.get("id") is not None:
                working["categoryId"] = str(category["id"])

        if not working.get("image"):
            images = working.get("images")
            if isinstance(images, list) and images:
                first = images[0]
                if isinstance(first, dict):
                    url = first.get("url")
                    if url:
                        working["image"] = url
                elif isinstance(first, str):
                    working["image"] = first

        reviews = working.get("reviews")
        if isinstance(reviews, list):
            working["reviews"] = len(reviews)
        elif reviews is None:
            count = working.get("_count")
            if isinstance(count, dict) and isinstance(count.get("reviews"), int):
                working["reviews"] = count["reviews"]
        return working

    @property
    def is_on_sale(self) -> bool:
        """Whether the product is priced below its original price."""
        return self.original_price is not None and self.original_price > self.price
