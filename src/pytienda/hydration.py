"""Startup gate: rehydrate persisted stores, then load the catalog.

The coordinator moves through three phases exactly once::

    NOT_HYDRATED -> HYDRATED_PENDING_FETCH -> READY

Persisted stores are rehydrated first. Categories and products are then
fetched concurrently and joined on settle: a failed (or timed out) fetch
is logged and leaves that part of the catalog empty, it never keeps the
coordinator from reaching ``READY``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from enum import StrEnum
from typing import Any, Protocol, TypeVar

from pytienda.models.category import Category
from pytienda.models.product import Product
from pytienda.state.base import PersistedStore
from pytienda.state.catalog import CatalogStore

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class HydrationPhase(StrEnum):
    NOT_HYDRATED = "not_hydrated"
    HYDRATED_PENDING_FETCH = "hydrated_pending_fetch"
    READY = "ready"


class CatalogSource(Protocol):
    """Remote catalog collaborator (see :class:`pytienda.client.TiendaClient`)."""

    async def fetch_categories(self) -> list[Category]: ...

    async def fetch_products(self) -> list[Product]: ...


class HydrationCoordinator:
    """Owns startup sequencing for the client-side stores.

    Parameters
    ----------
    stores
        Persisted stores to rehydrate before anything else.
    source
        Remote catalog collaborator.
    catalog
        Store that receives the fetched categories and products.
    fetch_timeout
        Per-fetch deadline in seconds. ``None`` waits indefinitely.
    """

    def __init__(
        self,
        stores: Sequence[PersistedStore[Any]],
        source: CatalogSource,
        catalog: CatalogStore,
        *,
        fetch_timeout: float | None = None,
    ) -> None:
        self._stores = tuple(stores)
        self._source = source
        self._catalog = catalog
        self._fetch_timeout = fetch_timeout
        self._phase = HydrationPhase.NOT_HYDRATED
        self._ready = asyncio.Event()
        self._run: asyncio.Task[None] | None = None
        self._listeners: list[Callable[[HydrationPhase], None]] = []

    @property
    def phase(self) -> HydrationPhase:
        return self._phase

    @property
    def is_ready(self) -> bool:
        return self._phase == HydrationPhase.READY

    def on_phase_change(self, listener: Callable[[HydrationPhase], None]) -> None:
        self._listeners.append(listener)

    def gate(self, content: T, placeholder: T | None = None) -> T | None:
        """Return *content* once ``READY``, *placeholder* before that."""
        return content if self.is_ready else placeholder

    async def start(self) -> None:
        """Run the startup sequence; concurrent and repeated calls share one run.

        Cancelling the caller does not cancel the underlying run.
        """
        if self._run is None:
            self._run = asyncio.ensure_future(self._hydrate())
        await asyncio.shield(self._run)

    async def wait_ready(self) -> None:
        """Block until the coordinator reaches ``READY``."""
        await self._ready.wait()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _transition(self, phase: HydrationPhase) -> None:
        _logger.debug("Hydration %s -> %s", self._phase, phase)
        self._phase = phase
        for listener in list(self._listeners):
            try:
                listener(phase)
            except Exception:
                _logger.warning("Hydration phase listener failed", exc_info=True)

    async def _with_deadline(self, call: Callable[[], Awaitable[T]]) -> T:
        if self._fetch_timeout is None:
            return await call()
        return await asyncio.wait_for(call(), self._fetch_timeout)

    async def _hydrate(self) -> None:
        results = await asyncio.gather(*(store.rehydrate() for store in self._stores), return_exceptions=True)
        for store, result in zip(self._stores, results, strict=True):
            if isinstance(result, BaseException):
                _logger.warning("Rehydrating %s failed", store.storage_key, exc_info=result)
        self._transition(HydrationPhase.HYDRATED_PENDING_FETCH)

        categories, products = await asyncio.gather(
            self._with_deadline(self._source.fetch_categories),
            self._with_deadline(self._source.fetch_products),
            return_exceptions=True,
        )

        errors: list[str] = []
        if isinstance(categories, BaseException):
            _logger.warning("Fetching categories failed: %r", categories, exc_info=categories)
            errors.append(f"categories: {categories!r}")
        else:
            self._catalog.set_categories(categories)

        if isinstance(products, BaseException):
            _logger.warning("Fetching products failed: %r", products, exc_info=products)
            errors.append(f"products: {products!r}")
        else:
            self._catalog.set_products(products)

        self._catalog.mark_loaded(error="; ".join(errors) or None)
        self._transition(HydrationPhase.READY)
        self._ready.set()
        _logger.info(
            "Storefront ready: %d categories, %d products",
            len(self._catalog.categories),
            len(self._catalog.products),
        )
