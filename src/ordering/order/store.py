"""Order store: durable creation, lookup and append-only mutation of orders.

Status transitions and tracking appends for one order run under that
order's lock, so two actors racing on the same order are applied one after
the other and a conditional transition sees the status it expected or fails
with ``Conflict``. Reads take no lock.
"""

from contextlib import contextmanager

import structlog
from protean.exceptions import ObjectNotFoundError, TransactionError, ValidationError
from protean.utils.globals import current_domain
from shared.deadline import Deadline
from shared.errors import (
    Conflict,
    EmptyOrder,
    InvalidReference,
    InvalidRequest,
    MarketError,
    NotFound,
    Timeout,
    Unavailable,
)
from shared.locks import KeyedLocks
from sqlalchemy import exc as sa_exc

from ordering import settings
from ordering.catalog import get_catalog
from ordering.order.order import Order, parse_status
from ordering.relay import publish_all

logger = structlog.get_logger(__name__)

_order_locks = KeyedLocks("order")


@contextmanager
def storage_errors(operation: str):
    """Translate model and storage failures into the ordering error taxonomy."""
    try:
        yield
    except MarketError:
        raise
    except ObjectNotFoundError as exc:
        raise NotFound(str(exc) or "Order not found") from exc
    except ValidationError as exc:
        raise InvalidRequest(f"Invalid order data: {exc.messages}") from exc
    except TransactionError as exc:
        cause = exc.__cause__
        if isinstance(cause, (sa_exc.IntegrityError, sa_exc.DataError)):
            logger.warning("Order storage rejected the data", operation=operation, error=str(cause))
            raise InvalidRequest(f"Order storage rejected the data during {operation}") from exc
        logger.error("Order commit failed", operation=operation, error=str(exc))
        raise Unavailable("Order storage is unavailable") from exc
    except (sa_exc.IntegrityError, sa_exc.DataError) as exc:
        logger.warning("Order storage rejected the data", operation=operation, error=str(exc))
        raise InvalidRequest(f"Order storage rejected the data during {operation}") from exc
    except sa_exc.TimeoutError as exc:
        logger.error("Order storage timed out", operation=operation)
        raise Timeout(f"Order storage timed out during {operation}") from exc
    except (sa_exc.OperationalError, sa_exc.InterfaceError, sa_exc.DisconnectionError) as exc:
        logger.error("Order storage unavailable", operation=operation, error=str(exc))
        raise Unavailable("Order storage is unavailable") from exc


def _limit_and_offset(limit, offset) -> tuple[int, int]:
    limit = settings.ORDER_PAGE_LIMIT if limit is None else limit
    offset = 0 if offset is None else offset
    if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= settings.ORDER_PAGE_MAX:
        raise InvalidRequest(f"limit must be between 1 and {settings.ORDER_PAGE_MAX}")
    if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
        raise InvalidRequest("offset must be zero or positive")
    return limit, offset


class OrderStore:
    def __init__(self, catalog=None, locks: KeyedLocks | None = None):
        self._catalog = catalog
        self.locks = locks or _order_locks

    @property
    def catalog(self):
        return self._catalog or get_catalog()

    @property
    def repository(self):
        return current_domain.repository_for(Order)

    @staticmethod
    def _deadline(timeout) -> Deadline:
        return Deadline.of(settings.DEFAULT_TIMEOUT_SECONDS if timeout is None else timeout)

    # -------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------
    def _validate_references(self, farm_id: str, items: list[dict], prices: dict, deadline: Deadline) -> list[dict]:
        if not self.catalog.farm_exists(farm_id):
            raise InvalidReference(f"Farm {farm_id} does not exist")

        resolved = []
        for item in items:
            product_id = str(item["product_id"])
            try:
                product = self.catalog.get_product(product_id)
            except NotFound as exc:
                raise InvalidReference(f"Product {product_id} does not exist") from exc
            if str(product["farm_id"]) != str(farm_id):
                raise InvalidReference(f"Product {product_id} is not sold by farm {farm_id}")
            if product_id not in prices:
                raise InvalidReference(f"No price was captured for product {product_id}")
            resolved.append({"product_id": product_id, "quantity": item["quantity"], "unit_price": prices[product_id]})
            deadline.check("create_order")
        return resolved

    def create_order(
        self,
        buyer_id: str,
        farm_id: str,
        items: list[dict],
        prices_at_order_time: dict,
        delivery_method: str | None = None,
        delivery_address: dict | None = None,
        notes: str | None = None,
        timeout=None,
    ) -> Order:
        """Persist a pending order with its initial history entry.

        Args:
            items: List of dicts with product_id and quantity.
            prices_at_order_time: Mapping of product_id to the frozen unit price.
        """
        if not items:
            raise EmptyOrder("An order needs at least one item")
        if not buyer_id or not str(buyer_id).strip():
            raise InvalidReference("A buyer id is required")

        deadline = self._deadline(timeout)
        prices = {str(product_id): float(price) for product_id, price in (prices_at_order_time or {}).items()}
        items_data = self._validate_references(str(farm_id), items, prices, deadline)

        with storage_errors("create_order"):
            order = Order.create(
                buyer_id=buyer_id,
                farm_id=farm_id,
                items_data=items_data,
                delivery_method=delivery_method,
                delivery_address=delivery_address,
                notes=notes,
            )
            events = list(order._events)
            deadline.check("create_order")
            self.repository.add(order)

        logger.info(
            "Order created",
            order_id=str(order.id),
            buyer_id=str(buyer_id),
            farm_id=str(farm_id),
            total_amount=order.total_amount,
        )
        publish_all(events)
        return order

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get_order(self, order_id: str) -> Order:
        with storage_errors("get_order"):
            try:
                return self.repository.get(order_id)
            except ObjectNotFoundError as exc:
                raise NotFound(f"Order {order_id} does not exist") from exc

    def list_orders_for_buyer(self, buyer_id: str, status=None, limit=None, offset=None) -> list[Order]:
        limit, offset = _limit_and_offset(limit, offset)
        status = parse_status(status).value if status else None
        with storage_errors("list_orders_for_buyer"):
            return self.repository.for_buyer(buyer_id, status=status, limit=limit, offset=offset)

    def list_orders_for_farm(self, farm_id: str, status=None, limit=None, offset=None) -> list[Order]:
        limit, offset = _limit_and_offset(limit, offset)
        status = parse_status(status).value if status else None
        with storage_errors("list_orders_for_farm"):
            return self.repository.for_farm(farm_id, status=status, limit=limit, offset=offset)

    def snapshot(self, start, end, farm_id=None, buyer_id=None) -> list[Order]:
        """All orders created in ``[start, end)``; lock-free, for analytics."""
        with storage_errors("snapshot"):
            return self.repository.created_between(start, end, farm_id=farm_id, buyer_id=buyer_id)

    # -------------------------------------------------------------------
    # Append-only mutations
    # -------------------------------------------------------------------
    def append_status_transition(
        self,
        order_id: str,
        new_status,
        actor_id: str,
        expected_status=None,
        note: str | None = None,
        timeout=None,
    ) -> Order:
        """Move an order to ``new_status``.

        When ``expected_status`` is given the transition only happens if the
        order is still in that status; otherwise ``Conflict`` is raised.
        """
        target = parse_status(new_status)
        expected = parse_status(expected_status) if expected_status else None

        with self.locks.hold(str(order_id), self._deadline(timeout)):
            order = self.get_order(order_id)
            if expected is not None and order.current_status != expected:
                raise Conflict(
                    f"Order {order_id} is {order.status}, expected {expected.value}",
                    current_status=order.status,
                    expected_status=expected.value,
                )
            with storage_errors("append_status_transition"):
                event = order.transition_to(target, actor_id=actor_id, note=note)
                self.repository.add(order)

        logger.info(
            "Order status changed",
            order_id=str(order_id),
            previous_status=event.previous_status,
            new_status=event.new_status,
            actor_id=str(actor_id),
        )
        publish_all([event])
        return order

    def append_tracking_event(self, order_id: str, event: dict, actor_id: str, timeout=None) -> Order:
        """Append a tracking entry to an order that is on its way."""
        with self.locks.hold(str(order_id), self._deadline(timeout)):
            order = self.get_order(order_id)
            with storage_errors("append_tracking_event"):
                tracking_added = order.add_tracking_event(
                    actor_id=actor_id,
                    location=event.get("location"),
                    description=event.get("description"),
                    status_label=event.get("status_label"),
                    latitude=event.get("latitude"),
                    longitude=event.get("longitude"),
                    estimated_arrival=event.get("estimated_arrival"),
                )
                self.repository.add(order)

        logger.info("Tracking event added", order_id=str(order_id), sequence=tracking_added.sequence)
        publish_all([tracking_added])
        return order
