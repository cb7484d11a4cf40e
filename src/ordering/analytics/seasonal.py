"""Seasonal trends: how much of each product sells in each month of the year."""

import calendar

from shared.clock import as_utc

from ordering.analytics.facts import OrderFact


def seasonal_trends(facts: list[OrderFact], product_id: str | None = None, year: int | None = None) -> dict:
    """Quantity by month of year per product, summed across years.

    With ``year`` only that calendar year counts. Cancelled orders are
    excluded.
    """
    products: dict[str, dict] = {}
    for fact in facts:
        if fact.cancelled:
            continue
        created_at = as_utc(fact.created_at)
        if year is not None and created_at.year != year:
            continue
        for item in fact.items:
            if product_id and item.product_id != str(product_id):
                continue
            entry = products.setdefault(item.product_id, {"months": [0] * 12, "revenue": [0.0] * 12, "years": {}})
            entry["months"][created_at.month - 1] += item.quantity
            entry["revenue"][created_at.month - 1] += item.line_total
            per_year = entry["years"].setdefault(created_at.year, [0] * 12)
            per_year[created_at.month - 1] += item.quantity

    result = []
    for pid in sorted(products):
        entry = products[pid]
        months = entry["months"]
        peak = max(range(12), key=lambda index: (months[index], -index))
        result.append(
            {
                "product_id": pid,
                "months": [
                    {
                        "month": index + 1,
                        "name": calendar.month_name[index + 1],
                        "quantity": months[index],
                        "revenue": round(entry["revenue"][index], 2),
                    }
                    for index in range(12)
                ],
                "by_year": {str(y): quantities for y, quantities in sorted(entry["years"].items())},
                "total_quantity": sum(months),
                "peak_month": peak + 1 if any(months) else None,
            }
        )

    return {"year": year, "products": result}
