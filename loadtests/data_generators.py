"""Faker-based data generators for Locust load test scenarios.

Payloads match the field names expected by the API's Pydantic request
schemas. Products are registered through the development catalog endpoint
before a user starts shopping.
"""

import random
import uuid

from faker import Faker

fake = Faker()

FARM_IDS = [f"farm-lt-{index:02d}" for index in range(1, 6)]

PRODUCE = [
    "maize",
    "millet",
    "sorghum",
    "cassava",
    "yam",
    "okra",
    "tomato",
    "onion",
    "groundnut",
    "mango",
    "pineapple",
    "plantain",
]


def catalog_products() -> list[dict]:
    """Every produce item offered by every load test farm.

    Stock is high enough that checkouts rarely fail on availability; the
    contention scenario lowers it explicitly.
    """
    products = []
    for farm_id in FARM_IDS:
        for name in PRODUCE:
            products.append(
                {
                    "product_id": f"{farm_id}-{name}",
                    "farm_id": farm_id,
                    "name": name.capitalize(),
                    "unit_price": round(random.uniform(150.0, 4500.0), 0),
                    "available_quantity": 1_000_000,
                }
            )
    return products


def buyer_id() -> str:
    """Unique buyer ids like 'buyer-lt-a1b2c3d4'."""
    return f"buyer-lt-{uuid.uuid4().hex[:8]}"


def buyer_headers(actor_id: str) -> dict:
    return {"X-Actor-Id": actor_id, "X-Actor-Role": "buyer"}


def farmer_headers(farm_id: str) -> dict:
    return {"X-Actor-Id": f"farmer-{farm_id}", "X-Actor-Role": "farmer", "X-Farm-Id": farm_id}


def admin_headers() -> dict:
    return {"X-Actor-Id": "admin-lt", "X-Actor-Role": "admin"}


def cart_item_data(farm_id: str | None = None) -> dict:
    """AddItemRequest payload for a random product (optionally from one farm)."""
    farm_id = farm_id or random.choice(FARM_IDS)
    return {"product_id": f"{farm_id}-{random.choice(PRODUCE)}", "quantity": random.randint(1, 5)}


def address_data() -> dict:
    return {
        "street": fake.street_address()[:255],
        "city": fake.city()[:100],
        "region": fake.state()[:100],
        "country": random.choice(["SN", "CI", "GH", "TG", "BJ", "ML"]),
    }


def checkout_data() -> dict:
    """CheckoutRequest payload; a third of orders are picked up at the farm."""
    if random.random() < 0.33:
        return {"delivery_method": "pickup", "notes": fake.sentence()[:200]}
    return {"delivery_method": "delivery", "delivery_address": address_data(), "notes": fake.sentence()[:200]}


def tracking_data() -> dict:
    return {
        "location": fake.city()[:200],
        "description": fake.sentence()[:200],
        "status_label": random.choice(["loaded", "in_transit", "at_depot", "out_for_delivery"]),
        "latitude": round(random.uniform(4.0, 16.0), 4),
        "longitude": round(random.uniform(-17.0, 2.0), 4),
    }
