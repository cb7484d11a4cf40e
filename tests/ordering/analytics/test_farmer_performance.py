"""Tests for farmer performance reports."""

from datetime import UTC, datetime, timedelta

import pytest
from ordering.analytics.farmer import (
    distribution,
    farmer_performance,
    percentile,
    performance_score,
    recommendations,
)

T0 = datetime(2024, 4, 1, 8, 0, tzinfo=UTC)


def _delivered(fact, hours, farm_id="farm-a", price=10.0):
    return fact(
        T0,
        [("maize", 1, price)],
        status="delivered",
        farm_id=farm_id,
        order_id=f"{farm_id}-{hours}",
        confirmed_at=T0,
        delivered_at=T0 + timedelta(hours=hours),
    )


class TestStatistics:
    def test_percentile_nearest_rank(self):
        values = list(range(1, 11))
        assert percentile(values, 90) == 9
        assert percentile(values, 50) == 5
        assert percentile([4.0], 90) == 4.0

    def test_distribution(self):
        assert distribution([2.0, 4.0, 6.0, 8.0]) == {
            "count": 4,
            "min": 2.0,
            "max": 8.0,
            "mean": 5.0,
            "median": 5.0,
            "p90": 8.0,
        }

    def test_empty_distribution(self):
        assert distribution([])["count"] == 0
        assert distribution([])["median"] is None

    @pytest.mark.parametrize(
        "total,delivered,revenue,score",
        [
            (0, 0, 0.0, 50),
            (4, 2, 100.0, 65),
            (10, 10, 6000.0, 90),
            (200, 200, 200000.0, 100),
        ],
    )
    def test_performance_score(self, total, delivered, revenue, score):
        assert performance_score(total, delivered, revenue) == score


class TestRecommendations:
    def test_high_cancellation_rate(self):
        stats = {"cancellation_rate": 25.0, "total_orders": 4, "average_order_value": 5000.0}
        assert [advice["type"] for advice in recommendations(stats)] == ["operational"]

    def test_low_order_value_and_high_volume(self):
        stats = {"cancellation_rate": 0.0, "total_orders": 60, "average_order_value": 500.0}
        assert [advice["type"] for advice in recommendations(stats)] == ["revenue", "growth"]

    def test_no_orders_no_advice(self):
        stats = {"cancellation_rate": 0.0, "total_orders": 0, "average_order_value": 0.0}
        assert recommendations(stats) == []


class TestFarmReports:
    def test_fulfillment_hours_only_count_delivered_orders(self, fact):
        facts = [
            _delivered(fact, 24),
            _delivered(fact, 48),
            fact(T0, [("maize", 1, 10.0)], status="confirmed", confirmed_at=T0),
        ]

        [report] = farmer_performance(facts, "farm-a")

        assert report["fulfillment_hours"]["count"] == 2
        assert report["fulfillment_hours"]["mean"] == 36.0
        assert report["total_orders"] == 3
        assert report["completion_rate"] == 66.67

    def test_cancellations_lower_revenue_but_count_as_orders(self, fact):
        facts = [
            _delivered(fact, 24, price=100.0),
            fact(T0, [("maize", 1, 50.0)], status="cancelled", order_id="c-1"),
        ]

        [report] = farmer_performance(facts, "farm-a")

        assert report["revenue"] == 100.0
        assert report["cancellation_rate"] == 50.0
        assert report["cancelled_orders"] == 1

    def test_one_report_per_farm(self, fact):
        facts = [_delivered(fact, 10, farm_id="farm-b"), _delivered(fact, 12, farm_id="farm-a")]
        assert [report["farm_id"] for report in farmer_performance(facts)] == ["farm-a", "farm-b"]

    def test_farm_without_orders_gets_empty_report(self, fact):
        [report] = farmer_performance([_delivered(fact, 10)], "farm-z")
        assert report["total_orders"] == 0
        assert report["performance_score"] == 50
