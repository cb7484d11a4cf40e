"""Ordering load test scenarios.

Stateful SequentialTaskSet journeys covering a browsing buyer who edits and
clears a cart, a buyer who checks out across farms, and the farm side moving
those orders through to delivery with tracking updates.
"""

import random

from locust import SequentialTaskSet, task

from loadtests.data_generators import (
    FARM_IDS,
    buyer_headers,
    buyer_id,
    cart_item_data,
    checkout_data,
    farmer_headers,
    tracking_data,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import BuyerState, OrderState


class CartBrowsingJourney(SequentialTaskSet):
    """Add Items -> Re-add (merge) -> Update Quantity -> Remove -> View -> Clear.

    Models a buyer who fills a cart, changes their mind and leaves.
    """

    def on_start(self):
        self.state = BuyerState(buyer_id=buyer_id())
        self.headers = buyer_headers(self.state.buyer_id)
        self.item = cart_item_data()

    @task
    def add_item(self):
        with self.client.post(
            "/cart/items",
            json=self.item,
            headers=self.headers,
            catch_response=True,
            name="POST /cart/items",
        ) as resp:
            if resp.status_code == 201:
                self.state.cart_quantity += self.item["quantity"]
            else:
                resp.failure(f"Add cart item failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def add_same_item_again(self):
        with self.client.post(
            "/cart/items",
            json=self.item,
            headers=self.headers,
            catch_response=True,
            name="POST /cart/items",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Re-add cart item failed: {resp.status_code} {extract_error_detail(resp)}")
                return
            self.state.cart_quantity += self.item["quantity"]
            line = resp.json()["data"]["lines"][0]
            if line["quantity"] != self.state.cart_quantity:
                resp.failure(f"Merge lost an update: expected {self.state.cart_quantity}, got {line['quantity']}")

    @task
    def add_other_item(self):
        self.client.post("/cart/items", json=cart_item_data(), headers=self.headers, name="POST /cart/items")

    @task
    def update_quantity(self):
        with self.client.put(
            f"/cart/items/{self.item['product_id']}",
            json={"quantity": random.randint(1, 10)},
            headers=self.headers,
            catch_response=True,
            name="PUT /cart/items/{product_id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Update cart item failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def remove_item(self):
        self.client.delete(
            f"/cart/items/{self.item['product_id']}",
            headers=self.headers,
            name="DELETE /cart/items/{product_id}",
        )

    @task
    def view_cart(self):
        self.client.get("/cart", headers=self.headers, name="GET /cart")

    @task
    def clear_cart(self):
        self.client.delete("/cart", headers=self.headers, name="DELETE /cart")

    @task
    def done(self):
        self.interrupt()


class CheckoutJourney(SequentialTaskSet):
    """Fill Cart from Two Farms -> Checkout -> Farms Confirm, Prepare, Ship,
    Track and Deliver their orders -> Buyer Lists Orders.
    """

    def on_start(self):
        self.buyer = BuyerState(buyer_id=buyer_id())
        self.headers = buyer_headers(self.buyer.buyer_id)
        self.orders: list[OrderState] = []

    @task
    def fill_cart(self):
        for farm_id in random.sample(FARM_IDS, 2):
            for _ in range(random.randint(1, 3)):
                self.client.post(
                    "/cart/items",
                    json=cart_item_data(farm_id),
                    headers=self.headers,
                    name="POST /cart/items",
                )

    @task
    def checkout(self):
        with self.client.post(
            "/orders",
            json=checkout_data(),
            headers=self.headers,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Checkout failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()
                return
            for order in resp.json()["data"]["orders"]:
                self.orders.append(OrderState(order_id=order["order_id"], farm_id=order["farm_id"]))
                self.buyer.order_ids.append(order["order_id"])

    def _advance(self, order: OrderState, status: str):
        with self.client.patch(
            f"/orders/{order.order_id}/status",
            json={"status": status, "expected_status": order.current_status},
            headers=farmer_headers(order.farm_id),
            catch_response=True,
            name="PATCH /orders/{id}/status",
        ) as resp:
            if resp.status_code == 200:
                order.current_status = status
            else:
                resp.failure(f"Move to {status} failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def confirm(self):
        for order in self.orders:
            self._advance(order, "confirmed")

    @task
    def prepare(self):
        for order in self.orders:
            self._advance(order, "preparing")

    @task
    def ship_and_track(self):
        for order in self.orders:
            self._advance(order, "shipped")
            self.client.post(
                f"/orders/{order.order_id}/tracking",
                json=tracking_data(),
                headers=farmer_headers(order.farm_id),
                name="POST /orders/{id}/tracking",
            )

    @task
    def deliver(self):
        for order in self.orders:
            self._advance(order, "delivered")

    @task
    def list_orders(self):
        self.client.get("/orders", headers=self.headers, name="GET /orders")

    @task
    def done(self):
        self.interrupt()


class CancellationJourney(SequentialTaskSet):
    """Checkout -> Farm Cancels Before Preparing."""

    def on_start(self):
        self.headers = buyer_headers(buyer_id())

    @task
    def checkout_one_farm(self):
        self.client.post("/cart/items", json=cart_item_data(), headers=self.headers, name="POST /cart/items")
        resp = self.client.post("/orders", json=checkout_data(), headers=self.headers, name="POST /orders")
        if resp.status_code != 201:
            self.interrupt()
            return
        order = resp.json()["data"]["orders"][0]
        self.client.patch(
            f"/orders/{order['order_id']}/status",
            json={"status": "cancelled", "note": "Out of season"},
            headers=farmer_headers(order["farm_id"]),
            name="PATCH /orders/{id}/status",
        )

    @task
    def done(self):
        self.interrupt()
