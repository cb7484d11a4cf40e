"""Harvest Market ordering API.

Serves the cart, order and analytics endpoints. Every request runs inside
the ordering domain context so repositories resolve against its providers.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the configuration overlay.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from ordering.domain import ordering  # noqa: E402
from ordering.utils.logging import add_context, clear_context, configure_logging

configure_logging()
ordering.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Harvest Market Ordering API",
    description="Carts, farm orders, delivery tracking and order analytics",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the ordering domain context and bind request details for logging."""
    if request.url.path == "/health":
        return await call_next(request)

    clear_context()
    add_context(
        method=request.method,
        path=request.url.path,
        actor_id=request.headers.get("x-actor-id"),
    )
    with ordering.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers and error handlers
# ---------------------------------------------------------------------------
from ordering.api import (  # noqa: E402
    analytics_router,
    cart_router,
    dev_router,
    order_router,
    register_error_handlers,
)

register_error_handlers(app)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(analytics_router)
app.include_router(dev_router)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "service": "ordering",
            "domains": {"ordering": {"name": ordering.name}},
        }
    )
