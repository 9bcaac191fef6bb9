"""Catalog endpoints: /api/categories and /api/products."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pytienda._constants import CATEGORIES_ENDPOINT, DEFAULT_PRODUCT_PAGE_SIZE, PRODUCTS_ENDPOINT
from pytienda._transport import Transport
from pytienda.exceptions import TiendaApiError
from pytienda.models.category import Category
from pytienda.models.product import Product

_logger = logging.getLogger(__name__)

#: Hard stop for pagination in case the server never reports the last page.
_MAX_PAGES = 500


def _parse_list(items: Any, model: type[Any], endpoint: str) -> list[Any]:
    if not isinstance(items, list):
        raise TiendaApiError(f"{endpoint} returned {type(items).__name__}, expected a list", endpoint=endpoint)
    parsed = []
    for entry in items:
        try:
            parsed.append(model.model_validate(entry))
        except ValidationError:
            _logger.warning("Skipping malformed %s entry from %s", model.__name__, endpoint, exc_info=True)
    return parsed


async def fetch_categories(transport: Transport) -> list[Category]:
    """Fetch the active categories, ordered by ``sortOrder``."""
    body = await transport.get_json(CATEGORIES_ENDPOINT)
    categories: list[Category] = _parse_list(body, Category, CATEGORIES_ENDPOINT)
    return sorted(categories, key=lambda category: category.sort_order)


async def fetch_products(
    transport: Transport,
    *,
    page_size: int = DEFAULT_PRODUCT_PAGE_SIZE,
    category: str | None = None,
    search: str | None = None,
) -> list[Product]:
    """Fetch every product page and return the concatenated list.

    The endpoint answers ``{"products": [...], "pagination": {...}}``; a bare
    list is accepted as a single page.
    """
    products: list[Product] = []
    page = 1
    while page <= _MAX_PAGES:
        params = {"page": str(page), "limit": str(page_size)}
        if category:
            params["category"] = category
        if search:
            params["search"] = search

        body = await transport.get_json(PRODUCTS_ENDPOINT, params)
        if isinstance(body, list):
            products.extend(_parse_list(body, Product, PRODUCTS_ENDPOINT))
            break
        if not isinstance(body, dict):
            raise TiendaApiError(f"{PRODUCTS_ENDPOINT} returned an unexpected payload", endpoint=PRODUCTS_ENDPOINT)

        products.extend(_parse_list(body.get("products", []), Product, PRODUCTS_ENDPOINT))
        pagination = body.get("pagination")
        if not isinstance(pagination, dict) or not pagination.get("hasNext"):
            break
        page += 1
    else:
        _logger.warning("Stopped paging %s after %d pages", PRODUCTS_ENDPOINT, _MAX_PAGES)

    _logger.debug("Fetched %d products in %d page(s)", len(products), page)
    return products
