"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from pytest_bdd import given, parsers, then
from shared.errors import MarketError


@pytest.fixture()
def outcome():
    """Holds the error raised by the last When step, if any."""
    return {"error": None}


@pytest.fixture()
def attempt(outcome):
    """Run a When action, recording a domain error instead of raising it."""

    def run(action):
        try:
            return action()
        except MarketError as exc:
            outcome["error"] = exc
            return None

    return run


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.parse('the catalog lists "{product_id}" from "{farm_id}" at {price:f} with {stock:d} in stock'))
def _(catalog, product_id, farm_id, price, stock):
    catalog.register_product(product_id, farm_id=farm_id, unit_price=price, available_quantity=stock)


@given(parsers.parse('the buyer added {quantity:d} of "{product_id}"'))
def _(cart_store, buyer, quantity, product_id):
    cart_store.add_item(buyer.actor_id, product_id, quantity)


@given(parsers.parse('the catalog price of "{product_id}" changes to {price:f}'))
def _(catalog, product_id, price):
    catalog.set_price(product_id, price)


@given(parsers.parse('the catalog stock of "{product_id}" drops to {stock:d}'))
def _(catalog, product_id, stock):
    catalog.set_stock(product_id, stock)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.parse('the request fails with "{kind}"'))
def _(outcome, kind):
    assert outcome["error"] is not None, "expected the request to fail"
    assert outcome["error"].kind.value == kind


@then("the cart is empty")
def _(cart_store, buyer):
    assert cart_store.get_cart(buyer.actor_id).is_empty
