"""Contention scenarios.

CartContentionUser makes many users write to a handful of shared carts so
the per-buyer lock is always contended. StatusRaceUser makes several farm
workers race conditional transitions on the same orders; exactly one of
each race should win and the rest should see 409 Conflict.
"""

import random

from locust import HttpUser, constant_pacing, task

from loadtests.data_generators import buyer_headers, cart_item_data, farmer_headers
from loadtests.helpers.response import extract_error_detail

SHARED_BUYERS = [f"buyer-hot-{index}" for index in range(5)]


class CartContentionUser(HttpUser):
    wait_time = constant_pacing(0.1)  # ~10 requests/sec per user

    @task(5)
    def add_to_shared_cart(self):
        headers = buyer_headers(random.choice(SHARED_BUYERS))
        with self.client.post(
            "/cart/items",
            json=cart_item_data(),
            headers=headers,
            catch_response=True,
            name="[CONTENTION] POST /cart/items",
        ) as resp:
            if resp.status_code == 504:
                resp.failure(f"Cart lock wait timed out: {extract_error_detail(resp)}")

    @task(1)
    def read_shared_cart(self):
        self.client.get(
            "/cart",
            headers=buyer_headers(random.choice(SHARED_BUYERS)),
            name="[CONTENTION] GET /cart",
        )


class StatusRaceUser(HttpUser):
    wait_time = constant_pacing(0.5)

    @task
    def race(self):
        headers = buyer_headers(f"buyer-race-{random.randint(0, 9)}")
        self.client.post("/cart/items", json=cart_item_data(), headers=headers, name="[RACE] POST /cart/items")
        resp = self.client.post("/orders", json={}, headers=headers, name="[RACE] POST /orders")
        if resp.status_code != 201:
            return
        order = resp.json()["data"]["orders"][0]
        farm_headers = farmer_headers(order["farm_id"])
        outcomes = []
        for status in random.sample(["confirmed", "cancelled", "confirmed"], 3):
            with self.client.patch(
                f"/orders/{order['order_id']}/status",
                json={"status": status, "expected_status": "pending"},
                headers=farm_headers,
                catch_response=True,
                name="[RACE] PATCH /orders/{id}/status",
            ) as race_resp:
                outcomes.append(race_resp.status_code)
                if race_resp.status_code == 409:
                    race_resp.success()
        if outcomes.count(200) != 1:
            self.environment.events.request.fire(
                request_type="CHECK",
                name="[RACE] single winner",
                response_time=0,
                response_length=0,
                response=None,
                context={},
                exception=AssertionError(f"expected exactly one winner, got {outcomes}"),
            )
