"""Repository for the Order aggregate.

Adds the listing and windowed scans the store and the analytics aggregator
need on top of the standard ``get``/``add``.
"""

from datetime import datetime

from ordering.domain import ordering
from ordering.order.order import Order

# Rows fetched per round trip when scanning a time window
SCAN_PAGE_SIZE = 200


@ordering.repository(part_of=Order)
class OrderRepository:
    def _page(self, filters: dict, limit: int, offset: int) -> list[Order]:
        return self._dao.query.filter(**filters).order_by("-created_at").offset(offset).limit(limit).all().items

    def for_buyer(self, buyer_id: str, status: str | None = None, limit: int = 20, offset: int = 0) -> list[Order]:
        """Orders placed by a buyer, most recent first."""
        filters = {"buyer_id": str(buyer_id)}
        if status:
            filters["status"] = status
        return self._page(filters, limit, offset)

    def for_farm(self, farm_id: str, status: str | None = None, limit: int = 20, offset: int = 0) -> list[Order]:
        """Orders received by a farm, most recent first."""
        filters = {"farm_id": str(farm_id)}
        if status:
            filters["status"] = status
        return self._page(filters, limit, offset)

    def created_between(
        self,
        start: datetime,
        end: datetime,
        farm_id: str | None = None,
        buyer_id: str | None = None,
    ) -> list[Order]:
        """Every order created in ``[start, end)``, oldest first."""
        filters = {"created_at__gte": start, "created_at__lt": end}
        if farm_id:
            filters["farm_id"] = str(farm_id)
        if buyer_id:
            filters["buyer_id"] = str(buyer_id)

        orders: list[Order] = []
        offset = 0
        while True:
            page = (
                self._dao.query.filter(**filters)
                .order_by("created_at")
                .offset(offset)
                .limit(SCAN_PAGE_SIZE)
                .all()
                .items
            )
            orders.extend(page)
            if len(page) < SCAN_PAGE_SIZE:
                return orders
            offset += SCAN_PAGE_SIZE
