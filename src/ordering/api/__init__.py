"""Ordering domain API package."""

from ordering.api.errors import register_error_handlers
from ordering.api.routes import analytics_router, cart_router, dev_router, order_router

__all__ = ["analytics_router", "cart_router", "dev_router", "order_router", "register_error_handlers"]
