"""Tests for time windows and calendar buckets."""

from datetime import UTC, datetime, timedelta

import pytest
from ordering.analytics.window import (
    Bucket,
    TimeWindow,
    bucket_key,
    complete_periods,
    parse_bucket,
    period_start,
    shift_period,
)
from shared.errors import InvalidRequest

AS_OF = datetime(2024, 5, 15, 12, 0, tzinfo=UTC)


class TestTimeWindow:
    def test_trailing_timeframe(self):
        window = TimeWindow.trailing("7 days", as_of=AS_OF)
        assert window.end == AS_OF
        assert window.start == AS_OF - timedelta(days=7)

    def test_default_timeframe_is_thirty_days(self):
        window = TimeWindow.trailing(as_of=AS_OF)
        assert window.end - window.start == timedelta(days=30)

    def test_unknown_timeframe(self):
        with pytest.raises(InvalidRequest):
            TimeWindow.trailing("2 weeks", as_of=AS_OF)

    def test_explicit_bounds_win(self):
        start = datetime(2024, 1, 1, tzinfo=UTC)
        end = datetime(2024, 2, 1, tzinfo=UTC)
        window = TimeWindow.resolve(start=start, end=end, timeframe="7 days")
        assert (window.start, window.end) == (start, end)

    def test_naive_bounds_are_treated_as_utc(self):
        window = TimeWindow.resolve(start=datetime(2024, 1, 1), end=datetime(2024, 1, 2))
        assert window.start.tzinfo is not None

    def test_inverted_window_rejected(self):
        with pytest.raises(InvalidRequest):
            TimeWindow(start=AS_OF, end=AS_OF)

    def test_half_open(self):
        window = TimeWindow(start=datetime(2024, 1, 1, tzinfo=UTC), end=datetime(2024, 1, 2, tzinfo=UTC))
        assert window.contains(datetime(2024, 1, 1, tzinfo=UTC))
        assert not window.contains(datetime(2024, 1, 2, tzinfo=UTC))


class TestBuckets:
    def test_parse_bucket(self):
        assert parse_bucket("Week") == Bucket.WEEK
        with pytest.raises(InvalidRequest):
            parse_bucket("fortnight")

    @pytest.mark.parametrize(
        "bucket,expected",
        [(Bucket.DAY, "2024-03-07"), (Bucket.WEEK, "2024-W10"), (Bucket.MONTH, "2024-03")],
    )
    def test_bucket_key(self, bucket, expected):
        assert bucket_key(datetime(2024, 3, 7, 18, 30, tzinfo=UTC), bucket) == expected

    def test_week_starts_on_monday(self):
        assert period_start(datetime(2024, 3, 7, tzinfo=UTC), Bucket.WEEK) == datetime(2024, 3, 4, tzinfo=UTC)

    def test_shift_month_crosses_year(self):
        start = datetime(2024, 11, 1, tzinfo=UTC)
        assert shift_period(start, Bucket.MONTH, 3) == datetime(2025, 2, 1, tzinfo=UTC)
        assert shift_period(start, Bucket.MONTH, -11) == datetime(2023, 12, 1, tzinfo=UTC)

    def test_complete_periods_exclude_current_one(self):
        periods = complete_periods(AS_OF, Bucket.MONTH, 3)
        assert [start.month for start, _ in periods] == [2, 3, 4]
        assert periods[-1][1] == datetime(2024, 5, 1, tzinfo=UTC)
