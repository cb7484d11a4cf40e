from datetime import UTC, datetime

import pytest
from ordering.analytics.facts import ItemFact, OrderFact


def make_fact(
    created_at,
    items,
    status="pending",
    farm_id="farm-a",
    buyer_id="buyer-001",
    order_id=None,
    confirmed_at=None,
    delivered_at=None,
):
    """Build an OrderFact from ``[(product_id, quantity, unit_price), ...]``."""
    item_facts = tuple(ItemFact(product_id=p, quantity=q, unit_price=u) for p, q, u in items)
    return OrderFact(
        order_id=order_id or f"order-{created_at.isoformat()}-{farm_id}",
        buyer_id=buyer_id,
        farm_id=farm_id,
        status=status,
        total_amount=round(sum(i.line_total for i in item_facts), 2),
        created_at=created_at,
        items=item_facts,
        confirmed_at=confirmed_at,
        delivered_at=delivered_at,
    )


@pytest.fixture()
def fact():
    return make_fact


@pytest.fixture()
def as_of():
    return datetime(2024, 5, 15, 12, 0, tzinfo=UTC)
