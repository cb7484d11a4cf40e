"""FastAPI routes for the Ordering domain: cart, orders and analytics.

Successful responses use the envelope ``{"success": true, "data": ...}``
with an optional ``message``; failures are shaped by ``ordering.api.errors``.

Handlers are plain functions. FastAPI runs them in its threadpool, so a
request waiting on one buyer or order lock only blocks its own worker thread.
"""

import os
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from shared.access import Caller, require_buyer

from ordering.analytics.aggregator import AnalyticsAggregator
from ordering.analytics.window import TimeWindow
from ordering.api.dependencies import get_aggregator, get_caller, get_cart_store, get_engine
from ordering.api.schemas import (
    AddItemRequest,
    CartView,
    CheckoutRequest,
    CheckoutView,
    DevProductRequest,
    OrderView,
    StatusUpdateRequest,
    TrackingRequest,
    UpdateItemRequest,
)
from ordering.cart.store import CartStore
from ordering.catalog import get_catalog
from ordering.catalog.fake_catalog import FakeCatalog
from ordering.checkout.engine import OrderLifecycleEngine


def _ok(data, message: str | None = None) -> dict:
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body


def _cart(cart) -> dict:
    return CartView.from_domain(cart).model_dump(mode="json")


def _order(order) -> dict:
    return OrderView.from_domain(order).model_dump(mode="json")


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("")
def get_cart(caller: Caller = Depends(get_caller), store: CartStore = Depends(get_cart_store)) -> dict:
    require_buyer(caller)
    return _ok(_cart(store.get_cart(caller.actor_id)))


@cart_router.post("/items", status_code=201)
def add_cart_item(
    body: AddItemRequest,
    caller: Caller = Depends(get_caller),
    store: CartStore = Depends(get_cart_store),
) -> dict:
    require_buyer(caller)
    cart = store.add_item(caller.actor_id, body.product_id, body.quantity)
    return _ok(_cart(cart), "Item added to cart")


@cart_router.put("/items/{product_id}")
def update_cart_item(
    product_id: str,
    body: UpdateItemRequest,
    caller: Caller = Depends(get_caller),
    store: CartStore = Depends(get_cart_store),
) -> dict:
    require_buyer(caller)
    cart = store.update_item(caller.actor_id, product_id, body.quantity)
    return _ok(_cart(cart), "Cart item updated")


@cart_router.delete("/items/{product_id}")
def remove_cart_item(
    product_id: str,
    caller: Caller = Depends(get_caller),
    store: CartStore = Depends(get_cart_store),
) -> dict:
    require_buyer(caller)
    cart = store.remove_item(caller.actor_id, product_id)
    return _ok(_cart(cart), "Item removed from cart")


@cart_router.delete("")
def clear_cart(caller: Caller = Depends(get_caller), store: CartStore = Depends(get_cart_store)) -> dict:
    require_buyer(caller)
    store.clear_cart(caller.actor_id)
    return _ok(None, "Cart cleared")


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201)
def checkout(
    body: CheckoutRequest,
    caller: Caller = Depends(get_caller),
    engine: OrderLifecycleEngine = Depends(get_engine),
) -> dict:
    """Convert the caller's cart into one order per farm."""
    result = engine.checkout(
        caller,
        delivery_method=body.delivery_method,
        delivery_address=body.delivery_address.model_dump() if body.delivery_address else None,
        notes=body.notes,
    )
    view = CheckoutView.from_domain(result).model_dump(mode="json")
    message = "Order placed" if result.complete else "Some farms could not accept the order"
    return _ok(view, message)


@order_router.get("")
def list_my_orders(
    status: str | None = None,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    caller: Caller = Depends(get_caller),
    engine: OrderLifecycleEngine = Depends(get_engine),
) -> dict:
    orders = engine.list_buyer_orders(caller, status=status, limit=limit, offset=offset)
    return _ok([_order(order) for order in orders])


@order_router.get("/farm/{farm_id}")
def list_farm_orders(
    farm_id: str,
    status: str | None = None,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    caller: Caller = Depends(get_caller),
    engine: OrderLifecycleEngine = Depends(get_engine),
) -> dict:
    orders = engine.list_farm_orders(caller, farm_id, status=status, limit=limit, offset=offset)
    return _ok([_order(order) for order in orders])


@order_router.get("/{order_id}")
def get_order(
    order_id: str,
    caller: Caller = Depends(get_caller),
    engine: OrderLifecycleEngine = Depends(get_engine),
) -> dict:
    return _ok(_order(engine.get_order(caller, order_id)))


@order_router.patch("/{order_id}/status")
def update_order_status(
    order_id: str,
    body: StatusUpdateRequest,
    caller: Caller = Depends(get_caller),
    engine: OrderLifecycleEngine = Depends(get_engine),
) -> dict:
    order = engine.update_status(
        caller,
        order_id,
        body.status,
        expected_status=body.expected_status,
        note=body.note,
    )
    return _ok(_order(order), f"Order status updated to {order.status}")


@order_router.post("/{order_id}/tracking", status_code=201)
def add_tracking(
    order_id: str,
    body: TrackingRequest,
    caller: Caller = Depends(get_caller),
    engine: OrderLifecycleEngine = Depends(get_engine),
) -> dict:
    order = engine.add_tracking(caller, order_id, body.model_dump())
    return _ok(_order(order), "Tracking event added")


# ---------------------------------------------------------------------------
# Analytics Router
# ---------------------------------------------------------------------------
analytics_router = APIRouter(prefix="/analytics", tags=["analytics"])


@analytics_router.get("/orders")
def order_analytics(
    timeframe: str = "30 days",
    start: datetime | None = None,
    end: datetime | None = None,
    bucket: str = "day",
    farm_id: str | None = None,
    caller: Caller = Depends(get_caller),
    aggregator: AnalyticsAggregator = Depends(get_aggregator),
) -> dict:
    window = TimeWindow.resolve(start=start, end=end, timeframe=timeframe)
    return _ok(aggregator.order_analytics(window, bucket=bucket, farm_id=farm_id, caller=caller))


@analytics_router.get("/demand-forecast")
def demand_forecast(
    periods: int = Query(default=6, ge=1, le=60),
    period: str = "month",
    horizon: int = Query(default=1, ge=1, le=12),
    method: str = "linear",
    product_id: str | None = None,
    farm_id: str | None = None,
    caller: Caller = Depends(get_caller),
    aggregator: AnalyticsAggregator = Depends(get_aggregator),
) -> dict:
    return _ok(
        aggregator.demand_forecast(
            periods=periods,
            period=period,
            horizon=horizon,
            method=method,
            product_id=product_id,
            farm_id=farm_id,
            caller=caller,
        )
    )


@analytics_router.get("/seasonal-trends")
def seasonal_trends(
    product_id: str | None = None,
    farm_id: str | None = None,
    year: int | None = Query(default=None, ge=2000, le=2100),
    caller: Caller = Depends(get_caller),
    aggregator: AnalyticsAggregator = Depends(get_aggregator),
) -> dict:
    return _ok(aggregator.seasonal_trends(product_id=product_id, farm_id=farm_id, year=year, caller=caller))


@analytics_router.get("/farmer")
def farmer_analytics(
    timeframe: str = "30 days",
    farm_id: str | None = None,
    caller: Caller = Depends(get_caller),
    aggregator: AnalyticsAggregator = Depends(get_aggregator),
) -> dict:
    window = TimeWindow.trailing(timeframe)
    return _ok(aggregator.farmer_performance(window, farm_id=farm_id, caller=caller))


# ---------------------------------------------------------------------------
# Development Router (fake catalog seeding for local runs and load tests)
# ---------------------------------------------------------------------------
dev_router = APIRouter(prefix="/dev", tags=["dev"])


@dev_router.post("/catalog/products", status_code=201)
def register_fake_product(body: DevProductRequest) -> dict:
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Catalog seeding not available in production")

    catalog = get_catalog()
    if not isinstance(catalog, FakeCatalog):
        raise HTTPException(status_code=400, detail="Catalog seeding only available for FakeCatalog")

    product = catalog.register_product(
        product_id=body.product_id,
        farm_id=body.farm_id,
        unit_price=body.unit_price,
        available_quantity=body.available_quantity,
        name=body.name,
    )
    return _ok(product, "Product registered")
