"""Storefront configuration for pytienda."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from pytienda._constants import (
    BASE_URL,
    DEFAULT_ADMIN_EMAIL,
    DEFAULT_ADMIN_PASSWORD,
    DEFAULT_PRODUCT_PAGE_SIZE,
)
from pytienda.exceptions import TiendaConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class TiendaConfig:
    """Storefront configuration.

    Parameters
    ----------
    base_url : str
        Storefront API base URL (the ``/api/*`` routes live below it).
    store_slug : str or None
        Tenant slug. When set, persisted snapshots are namespaced per tenant
        so two storefronts sharing a storage directory do not collide.
    storage_dir : Path or None
        Directory for JSON snapshots. ``None`` keeps state in memory only.
    fetch_timeout : float or None
        Deadline in seconds for each startup catalog fetch. ``None`` waits
        indefinitely.
    product_page_size : int
        ``limit`` sent when paging through ``/api/products``.
    admin_email : str
        Email accepted by the static credential verifier.
    admin_password : str
        Password accepted by the static credential verifier.
    enforce_stock : bool
        Reject cart quantities above the product's stock count.
    """

    base_url: str = BASE_URL
    store_slug: str | None = None
    storage_dir: Path | None = None
    fetch_timeout: float | None = None
    product_page_size: int = DEFAULT_PRODUCT_PAGE_SIZE
    admin_email: str = DEFAULT_ADMIN_EMAIL
    admin_password: str = DEFAULT_ADMIN_PASSWORD
    enforce_stock: bool = False

    def __post_init__(self) -> None:
        if self.product_page_size <= 0:
            raise TiendaConfigError(f"product_page_size must be positive, got {self.product_page_size}")
        if self.fetch_timeout is not None and self.fetch_timeout <= 0:
            raise TiendaConfigError(f"fetch_timeout must be positive or None, got {self.fetch_timeout}")

    def storage_key(self, name: str) -> str:
        """Return the persistence key for store *name*, namespaced by tenant."""
        if self.store_slug:
            return f"{self.store_slug}:{name}"
        return name

    @classmethod
    def from_env(cls, **overrides: Any) -> TiendaConfig:
        """Create configuration from environment variables.

        Reads optional ``TIENDA_*`` variables. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        TiendaConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "TIENDA_BASE_URL": "base_url",
            "TIENDA_STORE_SLUG": "store_slug",
            "TIENDA_ADMIN_EMAIL": "admin_email",
            "TIENDA_ADMIN_PASSWORD": "admin_password",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        storage_env = env.get("TIENDA_STORAGE_DIR")
        if storage_env and "storage_dir" not in overrides:
            config_kwargs["storage_dir"] = Path(storage_env)

        timeout_env = env.get("TIENDA_FETCH_TIMEOUT")
        if timeout_env is not None and "fetch_timeout" not in overrides:
            try:
                config_kwargs["fetch_timeout"] = float(timeout_env)
            except ValueError as exc:
                raise TiendaConfigError(f"TIENDA_FETCH_TIMEOUT is not a number: {timeout_env!r}") from exc

        page_size_env = env.get("TIENDA_PRODUCT_PAGE_SIZE")
        if page_size_env is not None and "product_page_size" not in overrides:
            try:
                config_kwargs["product_page_size"] = int(page_size_env)
            except ValueError as exc:
                raise TiendaConfigError(f"TIENDA_PRODUCT_PAGE_SIZE is not an integer: {page_size_env!r}") from exc

        if "enforce_stock" not in overrides:
            config_kwargs["enforce_stock"] = _env_bool(env.get("TIENDA_ENFORCE_STOCK"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
