from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import pytest

from pytienda.client import TiendaClient
from pytienda.config import TiendaConfig
from pytienda.exceptions import TiendaApiError, TiendaError


@dataclass
class FakeStorefrontBackend:
    """In-memory stand-in for the storefront ``/api`` routes."""

    products: list[dict[str, Any]] = field(default_factory=list)
    categories: Any = field(default_factory=list)
    requests: list[tuple[str, dict[str, str]]] = field(default_factory=list)

    async def get_json(self, endpoint: str, params: Mapping[str, str] | None = None) -> Any:
        query = dict(params or {})
        self.requests.append((endpoint, query))

        if endpoint == "/api/categories":
            return self.categories

        if endpoint == "/api/products":
            page = int(query.get("page", "1"))
            limit = int(query.get("limit", "12"))
            start = (page - 1) * limit
            total = len(self.products)
            total_pages = max(1, -(-total // limit))
            return {
                "products": self.products[start : start + limit],
                "pagination": {
                    "page": page,
                    "limit": limit,
                    "total": total,
                    "totalPages": total_pages,
                    "hasNext": page < total_pages,
                    "hasPrev": page > 1,
                },
            }

        return {"error": "Not found"}


def _api_product(index: int) -> dict[str, Any]:
    return {
        "id": f"clx{index:04d}",
        "name": f"Producto {index}",
        "price": "1299.90",
        "comparePrice": None,
        "stock": index,
        "isActive": True,
        "isPromotion": index % 2 == 0,
        "category": {"id": "cat1", "name": "Electrónicos", "slug": "electronicos"},
        "images": [{"url": f"https://cdn.example.com/{index}.jpg", "sortOrder": 0}],
        "_count": {"reviews": 3},
    }


@pytest.mark.asyncio
async def test_fetch_products_walks_every_page() -> None:
    backend = FakeStorefrontBackend(products=[_api_product(i) for i in range(5)])
    config = TiendaConfig(product_page_size=2)

    async with TiendaClient(config, transport=backend) as client:
        products = await client.fetch_products()

    assert [p.id for p in products] == [f"clx{i:04d}" for i in range(5)]
    assert [query["page"] for _, query in backend.requests] == ["1", "2", "3"]

    first = products[0]
    assert first.price == Decimal("1299.90")
    assert first.category == "Electrónicos"
    assert first.category_id == "cat1"
    assert first.image == "https://cdn.example.com/0.jpg"
    assert first.has_promotion is True
    assert first.reviews == 3
    assert first.stock == 0


@pytest.mark.asyncio
async def test_fetch_products_passes_filters() -> None:
    backend = FakeStorefrontBackend(products=[_api_product(1)])

    async with TiendaClient(TiendaConfig(), transport=backend) as client:
        await client.fetch_products(category="electronicos", search="silla")

    _, query = backend.requests[0]
    assert query["category"] == "electronicos"
    assert query["search"] == "silla"


@pytest.mark.asyncio
async def test_fetch_categories_sorted_and_counted() -> None:
    backend = FakeStorefrontBackend(
        categories=[
            {"id": "b", "name": "Ropa", "slug": "ropa", "sortOrder": 2, "isActive": True, "_count": {"products": 7}},
            {"id": "a", "name": "Hogar", "slug": "hogar", "sortOrder": 1, "isActive": True, "parentId": None},
        ]
    )

    async with TiendaClient(TiendaConfig(), transport=backend) as client:
        categories = await client.fetch_categories()

    assert [c.slug for c in categories] == ["hogar", "ropa"]
    assert categories[1].product_count == 7
    assert categories[0].is_top_level


@pytest.mark.asyncio
async def test_malformed_entries_are_skipped() -> None:
    backend = FakeStorefrontBackend(categories=[{"id": "a", "name": "Hogar"}, {"name": "no id"}])

    async with TiendaClient(TiendaConfig(), transport=backend) as client:
        categories = await client.fetch_categories()

    assert [c.id for c in categories] == ["a"]


@pytest.mark.asyncio
async def test_non_list_categories_raise_api_error() -> None:
    backend = FakeStorefrontBackend(categories={"unexpected": True})

    async with TiendaClient(TiendaConfig(), transport=backend) as client:
        with pytest.raises(TiendaApiError):
            await client.fetch_categories()


@pytest.mark.asyncio
async def test_client_requires_context_manager() -> None:
    client = TiendaClient(TiendaConfig())
    with pytest.raises(TiendaError):
        await client.fetch_categories()
