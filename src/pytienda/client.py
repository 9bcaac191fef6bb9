"""High-level async client for the storefront catalog API."""

from __future__ import annotations

from typing import Any

import aiohttp

from pytienda._api.catalog import fetch_categories as _fetch_categories
from pytienda._api.catalog import fetch_products as _fetch_products
from pytienda._transport import JsonTransport, Transport
from pytienda.config import TiendaConfig
from pytienda.exceptions import TiendaError
from pytienda.models.category import Category
from pytienda.models.product import Product


class TiendaClient:
    """Async client for the storefront ``/api`` routes.

    Usage::

        async with TiendaClient(config) as client:
            categories = await client.fetch_categories()
            products = await client.fetch_products()
    """

    def __init__(
        self,
        config: TiendaConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TiendaClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = JsonTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise TiendaError("Client not initialized. Use 'async with TiendaClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Catalog reads
    # ------------------------------------------------------------------

    async def fetch_categories(self) -> list[Category]:
        """Fetch the active categories."""
        return await _fetch_categories(self._require_transport())

    async def fetch_products(
        self,
        *,
        category: str | None = None,
        search: str | None = None,
    ) -> list[Product]:
        """Fetch all products, optionally filtered by category slug or search text."""
        return await _fetch_products(
            self._require_transport(),
            page_size=self._config.product_page_size,
            category=category,
            search=search,
        )
