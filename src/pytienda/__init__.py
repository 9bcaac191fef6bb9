"""pytienda - Client-side state for a multi-tenant e-commerce storefront."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pytienda")
except PackageNotFoundError:
    __version__ = "0+local"
from pytienda.client import TiendaClient
from pytienda.config import TiendaConfig
from pytienda.exceptions import (
    TiendaApiError,
    TiendaAuthenticationError,
    TiendaConfigError,
    TiendaError,
    TiendaStorageError,
    TiendaTransportError,
)
from pytienda.hydration import CatalogSource, HydrationCoordinator, HydrationPhase
from pytienda.models import (
    CartItem,
    Category,
    Order,
    OrderItem,
    OrderStatus,
    Product,
    User,
    UserRole,
)
from pytienda.slug import generate_slug, unique_slug
from pytienda.state import (
    AuthStore,
    CartStore,
    CatalogStore,
    CredentialVerifier,
    FavoritesStore,
    OrderStore,
    StaticCredentialVerifier,
)
from pytienda.storage import JsonFileStorage, KeyValueStorage, MemoryStorage
from pytienda.storefront import Storefront

__all__ = [
    "__version__",
    "AuthStore",
    "CartItem",
    "CartStore",
    "CatalogSource",
    "CatalogStore",
    "Category",
    "CredentialVerifier",
    "FavoritesStore",
    "HydrationCoordinator",
    "HydrationPhase",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderStore",
    "Product",
    "StaticCredentialVerifier",
    "Storefront",
    "TiendaApiError",
    "TiendaAuthenticationError",
    "TiendaClient",
    "TiendaConfig",
    "TiendaConfigError",
    "TiendaError",
    "TiendaStorageError",
    "TiendaTransportError",
    "User",
    "UserRole",
    "generate_slug",
    "unique_slug",
]
