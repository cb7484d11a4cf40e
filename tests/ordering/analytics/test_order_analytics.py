"""Tests for order analytics over a set of orders."""

from datetime import UTC, datetime

from ordering.analytics.orders import by_bucket, by_status, order_analytics, overview, top_products
from ordering.analytics.window import Bucket


def _facts(fact):
    return [
        fact(datetime(2024, 3, 4, 9, tzinfo=UTC), [("maize", 2, 10.0)], status="delivered", order_id="o1"),
        fact(datetime(2024, 3, 4, 15, tzinfo=UTC), [("tomato", 4, 2.25)], status="pending", order_id="o2"),
        fact(datetime(2024, 3, 12, 9, tzinfo=UTC), [("maize", 1, 10.0)], status="cancelled", order_id="o3"),
        fact(
            datetime(2024, 4, 2, 9, tzinfo=UTC),
            [("tomato", 2, 2.25), ("okra", 1, 3.0)],
            status="shipped",
            order_id="o4",
        ),
    ]


class TestOverview:
    def test_revenue_excludes_cancelled_orders(self, fact):
        stats = overview(_facts(fact))

        assert stats["total_orders"] == 4
        assert stats["total_revenue"] == 36.5
        assert stats["average_order_value"] == 12.17
        assert stats["completion_rate"] == 25.0
        assert stats["cancellation_rate"] == 25.0
        assert stats["pending_orders"] == 1

    def test_empty(self):
        stats = overview([])
        assert stats["total_orders"] == 0
        assert stats["completion_rate"] == 0.0
        assert stats["average_order_value"] == 0.0


class TestBreakdowns:
    def test_by_status_lists_every_status(self, fact):
        counts = by_status(_facts(fact))
        assert set(counts) == {"pending", "confirmed", "preparing", "shipped", "delivered", "cancelled"}
        assert counts["cancelled"] == {"count": 1, "revenue": 10.0}
        assert counts["confirmed"]["count"] == 0

    def test_by_month(self, fact):
        series = by_bucket(_facts(fact), Bucket.MONTH)
        assert series == [
            {"bucket": "2024-03", "count": 3, "revenue": 29.0},
            {"bucket": "2024-04", "count": 1, "revenue": 7.5},
        ]

    def test_by_day_is_chronological(self, fact):
        labels = [entry["bucket"] for entry in by_bucket(list(reversed(_facts(fact))), Bucket.DAY)]
        assert labels == ["2024-03-04", "2024-03-12", "2024-04-02"]

    def test_top_products_by_quantity(self, fact):
        ranked = top_products(_facts(fact))

        assert [entry["product_id"] for entry in ranked] == ["tomato", "maize", "okra"]
        assert ranked[0] == {"product_id": "tomato", "quantity": 6, "revenue": 13.5, "order_count": 2}
        assert ranked[1]["quantity"] == 2

    def test_bundle(self, fact):
        result = order_analytics(_facts(fact), Bucket.WEEK)
        assert set(result) == {"overview", "by_status", "by_bucket", "top_products"}
        assert result["by_bucket"][0]["bucket"] == "2024-W10"
