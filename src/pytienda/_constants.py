"""Internal constants shared across the library."""

BASE_URL = "http://localhost:3000"
USER_AGENT = "pytienda/1.0"

# ------------------------------------------------------------------
# Persistence keys (one per persisted store)
# ------------------------------------------------------------------

CART_STORAGE_KEY = "cart-storage"
FAVORITES_STORAGE_KEY = "favorites-storage"
AUTH_STORAGE_KEY = "auth-storage"

#: Version written into every persisted snapshot envelope.
STORAGE_VERSION = 0

# ------------------------------------------------------------------
# Catalog endpoints
# ------------------------------------------------------------------

CATEGORIES_ENDPOINT = "/api/categories"
PRODUCTS_ENDPOINT = "/api/products"
DEFAULT_PRODUCT_PAGE_SIZE = 50

# ------------------------------------------------------------------
# Placeholder admin account accepted by the static credential verifier
# ------------------------------------------------------------------

DEFAULT_ADMIN_EMAIL = "admin@tienda.com"
DEFAULT_ADMIN_PASSWORD = "admin123"
DEFAULT_ADMIN_ID = "1"
DEFAULT_ADMIN_NAME = "Administrador"
