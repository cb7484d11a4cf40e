"""Farmer performance: fulfillment speed, cancellations, revenue and a score.

Fulfillment time is measured from the moment an order was confirmed to the
moment it was delivered; orders that never reached both are left out of the
distribution.
"""

import math
import statistics
from collections import defaultdict

from ordering.analytics.facts import OrderFact
from ordering.analytics.orders import overview, top_products

# Thresholds for the recommendations attached to a farm's report
HIGH_CANCELLATION_RATE = 10.0
LOW_AVERAGE_ORDER_VALUE = 2000.0
HIGH_VOLUME_ORDERS = 50


def percentile(values: list[float], pct: float) -> float:
    """Nearest-rank percentile of an unsorted, non-empty list."""
    ordered = sorted(values)
    rank = max(math.ceil(pct / 100.0 * len(ordered)), 1)
    return ordered[rank - 1]


def fulfillment_hours(facts: list[OrderFact]) -> list[float]:
    hours = []
    for fact in facts:
        if fact.confirmed_at is None or fact.delivered_at is None:
            continue
        hours.append((fact.delivered_at - fact.confirmed_at).total_seconds() / 3600.0)
    return hours


def distribution(values: list[float]) -> dict:
    if not values:
        return {"count": 0, "min": None, "max": None, "mean": None, "median": None, "p90": None}
    return {
        "count": len(values),
        "min": round(min(values), 2),
        "max": round(max(values), 2),
        "mean": round(statistics.fmean(values), 2),
        "median": round(statistics.median(values), 2),
        "p90": round(percentile(values, 90), 2),
    }


def performance_score(total_orders: int, delivered_orders: int, revenue: float) -> int:
    """0-100: base 50, up to 30 for completion, up to 20 each for volume and revenue."""
    score = 50.0
    if total_orders:
        score += delivered_orders / total_orders * 30

    for threshold, points in ((100, 20), (50, 15), (20, 10), (5, 5)):
        if total_orders > threshold:
            score += points
            break

    for threshold, points in ((100000, 20), (50000, 15), (20000, 10), (5000, 5)):
        if revenue > threshold:
            score += points
            break

    return min(100, max(0, round(score)))


def recommendations(stats: dict) -> list[dict]:
    advice = []
    if stats["cancellation_rate"] > HIGH_CANCELLATION_RATE:
        advice.append(
            {
                "type": "operational",
                "priority": "high",
                "message": "High cancellation rate detected. Review the order fulfillment process.",
            }
        )
    if stats["total_orders"] and stats["average_order_value"] < LOW_AVERAGE_ORDER_VALUE:
        advice.append(
            {
                "type": "revenue",
                "priority": "medium",
                "message": "Low average order value. Consider bundles or minimum order incentives.",
            }
        )
    if stats["total_orders"] > HIGH_VOLUME_ORDERS:
        advice.append(
            {
                "type": "growth",
                "priority": "low",
                "message": "Strong order volume indicates room to scale operations.",
            }
        )
    return advice


def farm_report(farm_id: str, facts: list[OrderFact]) -> dict:
    stats = overview(facts)
    return {
        "farm_id": farm_id,
        "total_orders": stats["total_orders"],
        "delivered_orders": stats["delivered_orders"],
        "cancelled_orders": stats["cancelled_orders"],
        "cancellation_rate": stats["cancellation_rate"],
        "completion_rate": stats["completion_rate"],
        "revenue": stats["total_revenue"],
        "average_order_value": stats["average_order_value"],
        "fulfillment_hours": distribution(fulfillment_hours(facts)),
        "top_products": top_products(facts, limit=5),
        "performance_score": performance_score(
            stats["total_orders"], stats["delivered_orders"], stats["total_revenue"]
        ),
        "recommendations": recommendations(stats),
    }


def farmer_performance(facts: list[OrderFact], farm_id: str | None = None) -> list[dict]:
    """One report per farm present in ``facts`` (or just ``farm_id``)."""
    by_farm: dict[str, list[OrderFact]] = defaultdict(list)
    for fact in facts:
        by_farm[fact.farm_id].append(fact)
    if farm_id is not None:
        return [farm_report(str(farm_id), by_farm.get(str(farm_id), []))]
    return [farm_report(fid, by_farm[fid]) for fid in sorted(by_farm)]
