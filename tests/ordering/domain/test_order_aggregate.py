"""Tests for Order creation, frozen prices and the tracking log."""

import json

import pytest
from ordering.order.events import OrderCreated, TrackingAdded
from ordering.order.order import Order, OrderStatus
from shared.errors import EmptyOrder, InvalidQuantity, InvalidRequest, InvalidState


def _make_order(**overrides):
    params = {
        "buyer_id": "buyer-001",
        "farm_id": "farm-a",
        "items_data": [
            {"product_id": "maize", "quantity": 2, "unit_price": 10.0},
            {"product_id": "cassava", "quantity": 3, "unit_price": 4.5},
        ],
    }
    params.update(overrides)
    return Order.create(**params)


class TestOrderCreation:
    def test_new_order_is_pending(self):
        order = _make_order()
        assert order.current_status == OrderStatus.PENDING
        assert not order.is_terminal

    def test_total_is_sum_of_frozen_line_prices(self):
        order = _make_order()
        assert order.total_amount == 33.5
        assert [item.line_total for item in order.ordered_items] == [20.0, 13.5]

    def test_defaults(self):
        order = _make_order()
        assert order.currency == "XOF"
        assert order.delivery_method == "pickup"
        assert order.delivery_address is None

    def test_history_starts_with_creation_entry(self):
        order = _make_order()

        assert len(order.history) == 1
        entry = order.history[0]
        assert entry.status == "pending"
        assert entry.actor_id == "buyer-001"
        assert entry.sequence == 1
        assert entry.note == "Order created"

    def test_delivery_address_is_captured(self):
        order = _make_order(
            delivery_method="delivery",
            delivery_address={"street": "12 Rue du Marché", "city": "Dakar", "country": "SN"},
        )

        assert order.delivery_method == "delivery"
        assert order.delivery_address.city == "Dakar"

    def test_empty_items_rejected(self):
        with pytest.raises(EmptyOrder):
            _make_order(items_data=[])

    def test_non_positive_quantity_rejected(self):
        with pytest.raises(InvalidQuantity):
            _make_order(items_data=[{"product_id": "maize", "quantity": 0, "unit_price": 10.0}])

    def test_raises_order_created_event(self):
        order = _make_order()

        assert len(order._events) == 1
        event = order._events[0]
        assert isinstance(event, OrderCreated)
        assert event.order_id == str(order.id)
        assert event.total_amount == 33.5
        assert json.loads(event.items)[0] == {"product_id": "maize", "quantity": 2, "unit_price": 10.0}


class TestTracking:
    def test_pending_order_cannot_be_tracked(self):
        order = _make_order()
        with pytest.raises(InvalidState):
            order.add_tracking_event("farmer-a", location="Farm gate")

    def test_tracking_appends_in_sequence(self):
        order = _make_order()
        order.transition_to("confirmed", "farmer-a")
        order.transition_to("preparing", "farmer-a")
        order.transition_to("shipped", "farmer-a")
        order._events.clear()

        first = order.add_tracking_event("farmer-a", location="Farm gate", latitude=14.7, longitude=-17.4)
        second = order.add_tracking_event("farmer-a", description="On the Thiès road", status_label="in_transit")

        assert isinstance(first, TrackingAdded)
        assert [event.sequence for event in order.tracking] == [1, 2]
        assert order.tracking[0].recorded_at < order.tracking[1].recorded_at
        assert second.status_label == "in_transit"
        assert len(order._events) == 2

    def test_tracking_needs_location_or_description(self):
        order = _make_order()
        order.transition_to("confirmed", "farmer-a")
        with pytest.raises(InvalidRequest):
            order.add_tracking_event("farmer-a")

    def test_tracking_needs_both_coordinates(self):
        order = _make_order()
        order.transition_to("confirmed", "farmer-a")
        with pytest.raises(InvalidRequest):
            order.add_tracking_event("farmer-a", location="Depot", latitude=14.7)

    def test_delivered_order_cannot_be_tracked(self):
        order = _make_order()
        for status in ("confirmed", "preparing", "shipped", "delivered"):
            order.transition_to(status, "farmer-a")
        with pytest.raises(InvalidState):
            order.add_tracking_event("farmer-a", location="Doorstep")


class TestDeliveryDetails:
    def test_pickup_needs_no_address(self):
        order = _make_order(delivery_method="pickup")
        assert order.delivery_address is None

    def test_delivery_without_address_rejected(self):
        with pytest.raises(InvalidRequest):
            _make_order(delivery_method="delivery")

    def test_delivery_address_needs_a_city(self):
        with pytest.raises(InvalidRequest):
            _make_order(delivery_method="delivery", delivery_address={"street": "12 Rue du Marché"})

    def test_pickup_may_carry_a_partial_address(self):
        order = _make_order(delivery_address={"region": "Thiès"})
        assert order.delivery_address.region == "Thiès"
        assert order.delivery_address.city is None
