"""Ordering bounded context: buyer carts, farm orders and order analytics.

Carts live in a key-value cache and are converted into one order per farm at
checkout. Orders are CQRS aggregates whose status history and tracking log
are append-only.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
