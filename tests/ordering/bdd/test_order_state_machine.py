"""BDD tests for order state machine."""

import pytest
from pytest_bdd import given, parsers, scenarios, then, when
from shared.access import Caller, Role

scenarios("features/order_state_machine.feature")


@pytest.fixture()
def placed():
    return {}


def _farm_caller(order):
    return Caller(actor_id=f"farmer-{order.farm_id}", role=Role.FARMER, farm_id=str(order.farm_id))


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.parse('a pending order for "{farm_id}"'))
def _(order_store, catalog, placed, farm_id):
    product = next(p for p in catalog.products.values() if p["farm_id"] == farm_id)
    placed["order"] = order_store.create_order(
        "buyer-001",
        farm_id,
        [{"product_id": product["product_id"], "quantity": 1}],
        {product["product_id"]: product["unit_price"]},
    )


@given(parsers.parse('the order was moved to "{status}"'))
def _(engine, placed, status):
    order = placed["order"]
    placed["order"] = engine.update_status(_farm_caller(order), order.id, status)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.re(r'the farm moves the order to "(?P<status>[^"]+)"$'))
def _(engine, placed, attempt, status):
    order = placed["order"]
    attempt(lambda: engine.update_status(_farm_caller(order), order.id, status))


@when(parsers.re(r'the farm moves the order to "(?P<status>[^"]+)" expecting "(?P<expected>[^"]+)"'))
def _(engine, placed, attempt, status, expected):
    order = placed["order"]
    attempt(lambda: engine.update_status(_farm_caller(order), order.id, status, expected_status=expected))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.parse('the order is "{status}"'))
def _(order_store, placed, status):
    assert order_store.get_order(placed["order"].id).status == status


@then(parsers.parse('the order history reads "{statuses}"'))
def _(order_store, placed, statuses):
    history = order_store.get_order(placed["order"].id).history
    assert [entry.status for entry in history] == [s.strip() for s in statuses.split(",")]
