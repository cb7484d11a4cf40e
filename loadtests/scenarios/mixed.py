"""Mixed ordering workload scenario.

Combines the buyer and farm journeys with analytics reads, weighted to model
a market day. This is the recommended scenario for load baseline testing.
"""

import random

from locust import HttpUser, between, task

from loadtests.data_generators import FARM_IDS, admin_headers, farmer_headers
from loadtests.scenarios.ordering import CancellationJourney, CartBrowsingJourney, CheckoutJourney


class MixedWorkloadUser(HttpUser):
    """Realistic mixed workload.

    - Cart browsing: most common; many carts never reach checkout
    - Checkout with farm fulfilment: the revenue path
    - Cancellation: occasional
    - Analytics: farmers and admins checking their dashboards
    """

    wait_time = between(0.5, 2.0)

    tasks = {
        CartBrowsingJourney: 40,
        CheckoutJourney: 30,
        CancellationJourney: 5,
    }

    @task(10)
    def farmer_dashboard(self):
        headers = farmer_headers(random.choice(FARM_IDS))
        self.client.get("/analytics/orders", params={"bucket": "week"}, headers=headers, name="GET /analytics/orders")
        self.client.get("/analytics/farmer", headers=headers, name="GET /analytics/farmer")

    @task(3)
    def market_trends(self):
        headers = admin_headers()
        self.client.get(
            "/analytics/demand-forecast",
            params={"period": "week", "periods": 8, "method": random.choice(["linear", "moving_average"])},
            headers=headers,
            name="GET /analytics/demand-forecast",
        )
        self.client.get("/analytics/seasonal-trends", headers=headers, name="GET /analytics/seasonal-trends")
