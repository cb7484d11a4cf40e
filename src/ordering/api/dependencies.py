"""Request-scoped dependencies: caller identity and the ordering services."""

from fastapi import Header
from shared.access import Caller
from shared.errors import Unauthenticated

from ordering.analytics.aggregator import AnalyticsAggregator
from ordering.cart.store import CartStore
from ordering.checkout.engine import OrderLifecycleEngine


def get_caller(
    x_actor_id: str | None = Header(default=None),
    x_actor_role: str | None = Header(default=None),
    x_farm_id: str | None = Header(default=None),
) -> Caller:
    """Identity forwarded by the gateway after authentication."""
    if not x_actor_id or not x_actor_role:
        raise Unauthenticated("Missing caller identity")
    return Caller.from_values(x_actor_id, x_actor_role, x_farm_id)


def get_cart_store() -> CartStore:
    return CartStore()


def get_engine() -> OrderLifecycleEngine:
    return OrderLifecycleEngine()


def get_aggregator() -> AnalyticsAggregator:
    return AnalyticsAggregator()
