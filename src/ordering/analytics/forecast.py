"""Demand forecasting from historical order quantities.

For every product, quantities ordered in each of the trailing complete
periods (weeks or months) form a series which is extrapolated ``horizon``
periods ahead. Two methods are supported:

* ``linear``: least-squares line through the series
* ``moving_average``: mean of the last ``MOVING_AVERAGE_WINDOW`` periods

Forecasts never go below zero. Cancelled orders are not demand.
"""

from datetime import datetime
from enum import Enum

from shared.clock import as_utc
from shared.errors import InvalidRequest

from ordering.analytics.facts import OrderFact
from ordering.analytics.window import Bucket, bucket_key, complete_periods, shift_period

MOVING_AVERAGE_WINDOW = 3
MAX_PERIODS = 60
MAX_HORIZON = 12

# Relative slope (against the series mean) below which a trend counts as flat
TREND_TOLERANCE = 0.05


class ForecastMethod(Enum):
    LINEAR = "linear"
    MOVING_AVERAGE = "moving_average"


def parse_method(value) -> ForecastMethod:
    if isinstance(value, ForecastMethod):
        return value
    try:
        return ForecastMethod(str(value).lower())
    except ValueError:
        raise InvalidRequest(f"Unknown forecast method {value!r}; use linear or moving_average") from None


def linear_fit(series: list[float]) -> tuple[float, float]:
    """Least-squares ``(slope, intercept)`` with x = 0, 1, 2, ..."""
    n = len(series)
    if n == 0:
        return 0.0, 0.0
    if n == 1:
        return 0.0, float(series[0])
    mean_x = (n - 1) / 2
    mean_y = sum(series) / n
    sxx = sum((x - mean_x) ** 2 for x in range(n))
    sxy = sum((x - mean_x) * (y - mean_y) for x, y in enumerate(series))
    slope = sxy / sxx
    return slope, mean_y - slope * mean_x


def project(series: list[float], horizon: int, method: ForecastMethod) -> list[float]:
    if method == ForecastMethod.MOVING_AVERAGE:
        window = series[-MOVING_AVERAGE_WINDOW:]
        level = sum(window) / len(window) if window else 0.0
        return [round(max(level, 0.0), 2) for _ in range(horizon)]

    slope, intercept = linear_fit(series)
    n = len(series)
    return [round(max(intercept + slope * (n + step), 0.0), 2) for step in range(horizon)]


def trend_label(series: list[float]) -> str:
    slope, _ = linear_fit(series)
    mean = sum(series) / len(series) if series else 0.0
    if mean == 0 or abs(slope) <= TREND_TOLERANCE * mean:
        return "stable"
    return "increasing" if slope > 0 else "decreasing"


def demand_series(facts: list[OrderFact], periods: list[tuple[datetime, datetime]], product_id=None) -> dict:
    """Quantity per product per period, zero-filled."""
    series: dict[str, list[float]] = {}
    for fact in facts:
        if fact.cancelled:
            continue
        created_at = as_utc(fact.created_at)
        index = next((i for i, (start, end) in enumerate(periods) if start <= created_at < end), None)
        if index is None:
            continue
        for item in fact.items:
            if product_id and item.product_id != str(product_id):
                continue
            values = series.setdefault(item.product_id, [0.0] * len(periods))
            values[index] += item.quantity
    return series


def demand_forecast(
    facts: list[OrderFact],
    as_of: datetime,
    period: Bucket = Bucket.MONTH,
    periods: int = 6,
    horizon: int = 1,
    method: ForecastMethod = ForecastMethod.LINEAR,
    product_id: str | None = None,
) -> dict:
    if period not in (Bucket.WEEK, Bucket.MONTH):
        raise InvalidRequest("Forecast period must be week or month")
    if not 1 <= periods <= MAX_PERIODS:
        raise InvalidRequest(f"periods must be between 1 and {MAX_PERIODS}")
    if not 1 <= horizon <= MAX_HORIZON:
        raise InvalidRequest(f"horizon must be between 1 and {MAX_HORIZON}")

    windows = complete_periods(as_of, period, periods)
    labels = [bucket_key(start, period) for start, _ in windows]
    next_start = windows[-1][1]
    forecast_labels = [bucket_key(shift_period(next_start, period, step), period) for step in range(horizon)]

    products = []
    for pid, values in sorted(demand_series(facts, windows, product_id).items()):
        predicted = project(values, horizon, method)
        products.append(
            {
                "product_id": pid,
                "history": [{"period": label, "quantity": value} for label, value in zip(labels, values)],
                "forecast": [{"period": label, "quantity": value} for label, value in zip(forecast_labels, predicted)],
                "trend": trend_label(values),
            }
        )

    return {
        "period": period.value,
        "periods": periods,
        "horizon": horizon,
        "method": method.value,
        "window": {"start": windows[0][0].isoformat(), "end": windows[-1][1].isoformat()},
        "products": products,
    }
