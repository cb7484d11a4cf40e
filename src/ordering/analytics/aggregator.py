"""Analytics aggregator: read-only views computed from order history.

Every view reads one snapshot of the relevant orders and computes its result
from that snapshot alone. Nothing is locked and nothing is written, so the
views never interfere with cart or order mutations, and asking the same
question twice over unchanged data gives the same answer.
"""

from datetime import UTC, datetime, timedelta

import structlog
from shared.access import Caller, Role, require_farm_access
from shared.clock import as_utc
from shared.errors import Forbidden, InvalidRequest

from ordering.analytics.facts import OrderFact
from ordering.analytics.farmer import farmer_performance
from ordering.analytics.forecast import demand_forecast, parse_method
from ordering.analytics.orders import order_analytics
from ordering.analytics.seasonal import seasonal_trends
from ordering.analytics.window import EPOCH, Bucket, TimeWindow, complete_periods, parse_bucket
from ordering.order.store import OrderStore

logger = structlog.get_logger(__name__)


class AnalyticsAggregator:
    def __init__(self, order_store: OrderStore | None = None):
        self.order_store = order_store or OrderStore()

    def _facts(self, start, end, farm_id=None, buyer_id=None) -> list[OrderFact]:
        orders = self.order_store.snapshot(start, end, farm_id=farm_id, buyer_id=buyer_id)
        return [OrderFact.from_order(order) for order in orders]

    @staticmethod
    def _scope(caller: Caller | None, farm_id: str | None, own_farm: bool = False) -> str | None:
        """Resolve which farm a view covers for this caller.

        Admins see what they ask for. Anyone else asking about a specific farm
        must act for it. With ``own_farm`` a missing farm id means the caller's
        own farm; without it, a missing farm id means the whole market.
        """
        if caller is None or caller.is_admin:
            return farm_id
        target = farm_id or (caller.farm_id if own_farm else None)
        if target is None:
            if own_farm:
                raise Forbidden(f"Actor {caller.actor_id} has no farm to report on")
            return None
        require_farm_access(caller, target)
        return target

    def order_analytics(
        self,
        window: TimeWindow,
        bucket="day",
        farm_id: str | None = None,
        buyer_id: str | None = None,
        caller: Caller | None = None,
    ) -> dict:
        if caller is not None and caller.role == Role.BUYER:
            buyer_id = caller.actor_id
        else:
            farm_id = self._scope(caller, farm_id, own_farm=True)
        bucket = parse_bucket(bucket)
        facts = self._facts(window.start, window.end, farm_id=farm_id, buyer_id=buyer_id)
        logger.debug("Order analytics computed", orders=len(facts), farm_id=farm_id, bucket=bucket.value)
        return {
            "window": window.to_dict(),
            "bucket": bucket.value,
            "farm_id": farm_id,
            **order_analytics(facts, bucket),
        }

    def demand_forecast(
        self,
        periods: int = 6,
        period="month",
        horizon: int = 1,
        method="linear",
        product_id: str | None = None,
        farm_id: str | None = None,
        as_of: datetime | None = None,
        caller: Caller | None = None,
    ) -> dict:
        farm_id = self._scope(caller, farm_id)
        period = parse_bucket(period)
        if period == Bucket.DAY:
            raise InvalidRequest("Forecast period must be week or month")
        method = parse_method(method)
        as_of = as_utc(as_of) if as_of else datetime.now(UTC)
        if not isinstance(periods, int) or periods < 1:
            raise InvalidRequest("periods must be a positive whole number")

        windows = complete_periods(as_of, period, periods)
        facts = self._facts(windows[0][0], windows[-1][1], farm_id=farm_id)
        return {
            "farm_id": farm_id,
            **demand_forecast(
                facts,
                as_of=as_of,
                period=period,
                periods=periods,
                horizon=horizon,
                method=method,
                product_id=product_id,
            ),
        }

    def seasonal_trends(
        self,
        product_id: str | None = None,
        farm_id: str | None = None,
        year: int | None = None,
        caller: Caller | None = None,
    ) -> dict:
        farm_id = self._scope(caller, farm_id)
        if year is not None:
            start = datetime(year, 1, 1, tzinfo=UTC)
            end = datetime(year + 1, 1, 1, tzinfo=UTC)
        else:
            start, end = EPOCH, datetime.now(UTC) + timedelta(days=1)
        facts = self._facts(start, end, farm_id=farm_id)
        return {"farm_id": farm_id, **seasonal_trends(facts, product_id=product_id, year=year)}

    def farmer_performance(
        self,
        window: TimeWindow,
        farm_id: str | None = None,
        caller: Caller | None = None,
    ) -> dict:
        farm_id = self._scope(caller, farm_id, own_farm=True)
        facts = self._facts(window.start, window.end, farm_id=farm_id)
        return {"window": window.to_dict(), "farms": farmer_performance(facts, farm_id=farm_id)}
