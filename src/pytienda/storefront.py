"""Composition root wiring every client-side store together."""

from __future__ import annotations

import logging
from typing import Any

from pytienda._constants import AUTH_STORAGE_KEY, CART_STORAGE_KEY, FAVORITES_STORAGE_KEY
from pytienda.client import TiendaClient
from pytienda.config import TiendaConfig
from pytienda.hydration import CatalogSource, HydrationCoordinator
from pytienda.models.order import Order
from pytienda.state.auth import AuthStore, CredentialVerifier, StaticCredentialVerifier
from pytienda.state.cart import CartStore
from pytienda.state.catalog import CatalogStore
from pytienda.state.favorites import FavoritesStore
from pytienda.state.orders import OrderStore
from pytienda.storage import JsonFileStorage, KeyValueStorage, MemoryStorage

_logger = logging.getLogger(__name__)


def build_storage(config: TiendaConfig) -> KeyValueStorage:
    """File-backed storage when ``storage_dir`` is set, memory otherwise."""
    if config.storage_dir is not None:
        return JsonFileStorage(config.storage_dir)
    return MemoryStorage()


class Storefront:
    """All client-side state for one storefront tenant.

    Usage::

        async with Storefront(config) as shop:
            shop.cart.add_item(product)

    Entering the context starts the HTTP client and awaits the hydration
    coordinator, so stores and catalog are ready inside the block.
    """

    def __init__(
        self,
        config: TiendaConfig,
        *,
        storage: KeyValueStorage | None = None,
        source: CatalogSource | None = None,
        verifier: CredentialVerifier | None = None,
    ) -> None:
        self._config = config
        self._storage = storage if storage is not None else build_storage(config)
        self._client: TiendaClient | None = None
        if source is None:
            self._client = TiendaClient(config)
            source = self._client
        if verifier is None:
            verifier = StaticCredentialVerifier(config.admin_email, config.admin_password)

        self.cart = CartStore(
            storage=self._storage,
            key=config.storage_key(CART_STORAGE_KEY),
            enforce_stock=config.enforce_stock,
        )
        self.favorites = FavoritesStore(storage=self._storage, key=config.storage_key(FAVORITES_STORAGE_KEY))
        self.auth = AuthStore(
            storage=self._storage,
            key=config.storage_key(AUTH_STORAGE_KEY),
            verifier=verifier,
        )
        self.catalog = CatalogStore()
        self.orders = OrderStore()
        self.hydration = HydrationCoordinator(
            [self.cart, self.favorites, self.auth],
            source,
            self.catalog,
            fetch_timeout=config.fetch_timeout,
        )

    @property
    def config(self) -> TiendaConfig:
        return self._config

    async def __aenter__(self) -> Storefront:
        if self._client is not None:
            await self._client.__aenter__()
        try:
            await self.hydration.start()
        except BaseException:
            await self._close_client()
            raise
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self._close_client()

    async def _close_client(self) -> None:
        if self._client is not None:
            await self._client.__aexit__(None, None, None)

    def checkout(
        self,
        *,
        shipping_address: str,
        phone: str = "",
        notes: str | None = None,
    ) -> Order:
        """Turn the cart into an order for the logged-in user and empty the cart."""
        order = self.orders.create_order(
            self.cart.items,
            self.auth.user,
            shipping_address=shipping_address,
            phone=phone,
            notes=notes,
        )
        self.cart.clear_cart()
        _logger.info("Checkout complete: order %s total %s", order.id, order.total_amount)
        return order
