from __future__ import annotations

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from pytienda.client import TiendaClient
from pytienda.config import TiendaConfig
from pytienda.exceptions import TiendaApiError, TiendaTransportError


def _app() -> web.Application:
    async def categories(request: web.Request) -> web.Response:
        return web.json_response([{"id": "1", "name": "Hogar", "slug": "hogar", "sortOrder": 1}])

    async def products(request: web.Request) -> web.Response:
        if request.query.get("search") == "boom":
            return web.json_response({"error": "Error interno del servidor"}, status=500)
        if request.query.get("search") == "html":
            return web.Response(text="<h1>Bad Gateway</h1>", status=502)
        if request.query.get("search") == "garbled":
            return web.Response(text="{not json", status=200)
        return web.json_response(
            {
                "products": [{"id": "p1", "name": "Silla", "price": "99.90", "stock": 4}],
                "pagination": {"page": 1, "limit": 50, "total": 1, "totalPages": 1, "hasNext": False},
            }
        )

    app = web.Application()
    app.router.add_get("/api/categories", categories)
    app.router.add_get("/api/products", products)
    return app


def _config(server: TestServer) -> TiendaConfig:
    return TiendaConfig(base_url=f"http://{server.host}:{server.port}/")


@pytest.mark.asyncio
async def test_client_reads_catalog_over_http() -> None:
    async with TestServer(_app()) as server, TiendaClient(_config(server)) as client:
        categories = await client.fetch_categories()
        products = await client.fetch_products()

    assert [c.slug for c in categories] == ["hogar"]
    assert [p.id for p in products] == ["p1"]
    assert products[0].stock == 4


@pytest.mark.asyncio
async def test_error_body_raises_api_error() -> None:
    async with TestServer(_app()) as server, TiendaClient(_config(server)) as client:
        with pytest.raises(TiendaApiError) as excinfo:
            await client.fetch_products(search="boom")

    assert excinfo.value.endpoint == "/api/products"
    assert excinfo.value.code == "500"


@pytest.mark.asyncio
async def test_non_json_error_raises_transport_error() -> None:
    async with TestServer(_app()) as server, TiendaClient(_config(server)) as client:
        with pytest.raises(TiendaTransportError) as excinfo:
            await client.fetch_products(search="html")

    assert excinfo.value.status_code == 502


@pytest.mark.asyncio
async def test_invalid_json_raises_transport_error() -> None:
    async with TestServer(_app()) as server, TiendaClient(_config(server)) as client:
        with pytest.raises(TiendaTransportError, match="Invalid JSON"):
            await client.fetch_products(search="garbled")


@pytest.mark.asyncio
async def test_unreachable_server_raises_transport_error() -> None:
    async with TestServer(_app()) as server:
        config = _config(server)
    # Server is closed now; the port refuses connections.
    async with TiendaClient(config) as client:
        with pytest.raises(TiendaTransportError):
            await client.fetch_categories()
