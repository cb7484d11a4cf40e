"""Order analytics: counts, revenue and rates over a window of orders.

Revenue never includes cancelled orders. Rates are percentages rounded to
two decimals and are zero when there are no orders.
"""

from collections import defaultdict

from ordering.analytics.facts import OrderFact
from ordering.analytics.window import Bucket, bucket_key
from ordering.order.order import OrderStatus

TOP_PRODUCTS_LIMIT = 10


def _rate(part: int, whole: int) -> float:
    return round(part * 100.0 / whole, 2) if whole else 0.0


def overview(facts: list[OrderFact]) -> dict:
    total = len(facts)
    billable = [fact for fact in facts if not fact.cancelled]
    delivered = sum(1 for fact in facts if fact.delivered)
    cancelled = total - len(billable)
    revenue = round(sum(fact.total_amount for fact in billable), 2)
    return {
        "total_orders": total,
        "delivered_orders": delivered,
        "pending_orders": sum(1 for fact in facts if fact.status == OrderStatus.PENDING.value),
        "cancelled_orders": cancelled,
        "total_revenue": revenue,
        "average_order_value": round(revenue / len(billable), 2) if billable else 0.0,
        "completion_rate": _rate(delivered, total),
        "cancellation_rate": _rate(cancelled, total),
    }


def by_status(facts: list[OrderFact]) -> dict:
    counts = {status.value: {"count": 0, "revenue": 0.0} for status in OrderStatus}
    for fact in facts:
        entry = counts[fact.status]
        entry["count"] += 1
        entry["revenue"] = round(entry["revenue"] + fact.total_amount, 2)
    return counts


def by_bucket(facts: list[OrderFact], bucket: Bucket) -> list[dict]:
    """Order count and revenue per calendar bucket, in chronological order."""
    series: dict[str, dict] = {}
    for fact in sorted(facts, key=lambda fact: fact.created_at):
        key = bucket_key(fact.created_at, bucket)
        entry = series.setdefault(key, {"bucket": key, "count": 0, "revenue": 0.0})
        entry["count"] += 1
        if not fact.cancelled:
            entry["revenue"] = round(entry["revenue"] + fact.total_amount, 2)
    return list(series.values())


def top_products(facts: list[OrderFact], limit: int = TOP_PRODUCTS_LIMIT) -> list[dict]:
    """Best-selling products by quantity, ties broken by revenue then id."""
    quantity = defaultdict(int)
    revenue = defaultdict(float)
    orders = defaultdict(set)
    for fact in facts:
        if fact.cancelled:
            continue
        for item in fact.items:
            quantity[item.product_id] += item.quantity
            revenue[item.product_id] += item.line_total
            orders[item.product_id].add(fact.order_id)

    ranked = sorted(quantity, key=lambda product_id: (-quantity[product_id], -revenue[product_id], product_id))
    return [
        {
            "product_id": product_id,
            "quantity": quantity[product_id],
            "revenue": round(revenue[product_id], 2),
            "order_count": len(orders[product_id]),
        }
        for product_id in ranked[:limit]
    ]


def order_analytics(facts: list[OrderFact], bucket: Bucket = Bucket.DAY) -> dict:
    return {
        "overview": overview(facts),
        "by_status": by_status(facts),
        "by_bucket": by_bucket(facts, bucket),
        "top_products": top_products(facts),
    }
