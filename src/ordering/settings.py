"""Runtime settings for the ordering context, read from the environment.

Adapter selection (``CART_CACHE``, ``CATALOG_ADAPTER``, ``RELAY_ADAPTER``) is
read lazily by the adapter registries so tests can switch backends.
"""

import os

REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
CART_KEY_PREFIX = os.environ.get("CART_KEY_PREFIX", "cart:")
CART_TTL_SECONDS = int(os.environ.get("CART_TTL_SECONDS", str(7 * 24 * 3600)))

CATALOG_URL = os.environ.get("CATALOG_URL", "http://localhost:8001")
CATALOG_TIMEOUT_SECONDS = float(os.environ.get("CATALOG_TIMEOUT_SECONDS", "5"))

# Applied to store and engine calls when the caller passes no timeout
DEFAULT_TIMEOUT_SECONDS = float(os.environ.get("DEFAULT_TIMEOUT_SECONDS", "10"))

ORDER_PAGE_LIMIT = 20
ORDER_PAGE_MAX = 100

# Protean broker and stream that carry ordering events to subscribers
RELAY_BROKER = os.environ.get("RELAY_BROKER", "default")
RELAY_STREAM = os.environ.get("RELAY_STREAM", "harvest::ordering")
