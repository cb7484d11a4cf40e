"""BDD tests for checkout."""

import pytest
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/checkout.feature")


@pytest.fixture()
def checkout_result():
    return {"result": None}


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the buyer checks out")
def _(engine, buyer, attempt, checkout_result):
    checkout_result["result"] = attempt(lambda: engine.checkout(buyer))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.parse("{count:d} orders are created"))
def _(checkout_result, count):
    assert len(checkout_result["result"].orders) == count


@then(parsers.parse('the order for "{farm_id}" totals {total:f}'))
def _(checkout_result, farm_id, total):
    [order] = [order for order in checkout_result["result"].orders if str(order.farm_id) == farm_id]
    assert order.total_amount == pytest.approx(total)
    assert order.status == "pending"


@then("no orders exist for the buyer")
def _(order_store, buyer):
    assert order_store.list_orders_for_buyer(buyer.actor_id) == []
