import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.api import analytics_router, cart_router, dev_router, order_router, register_error_handlers


@pytest.fixture()
def api_app(catalog):
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(analytics_router)
    app.include_router(dev_router)
    return app


@pytest.fixture()
def client(api_app):
    return TestClient(api_app)


@pytest.fixture()
def buyer_headers():
    return {"X-Actor-Id": "buyer-001", "X-Actor-Role": "buyer"}


@pytest.fixture()
def farmer_a_headers():
    return {"X-Actor-Id": "farmer-a", "X-Actor-Role": "farmer", "X-Farm-Id": "farm-a"}


@pytest.fixture()
def farmer_b_headers():
    return {"X-Actor-Id": "farmer-b", "X-Actor-Role": "farmer", "X-Farm-Id": "farm-b"}


@pytest.fixture()
def admin_headers():
    return {"X-Actor-Id": "admin-001", "X-Actor-Role": "admin"}
