"""Order aggregate (CQRS): one farm's share of a buyer's checkout.

Prices and the total are frozen when the order is created. The status
history and the tracking log only ever grow, and the current status is
always the status of the newest history entry.

State Machine:
    PENDING → CONFIRMED → PREPARING → SHIPPED → DELIVERED
    {PENDING, CONFIRMED, PREPARING} → CANCELLED
    DELIVERED and CANCELLED are terminal.
"""

import json
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)
from shared.clock import as_utc, as_utc_or_none
from shared.errors import EmptyOrder, InvalidRequest, InvalidState, InvalidTransition, TerminalState

from ordering.cart.cart import validate_quantity
from ordering.domain import ordering
from ordering.order.events import OrderCreated, OrderStatusChanged, TrackingAdded


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class DeliveryMethod(Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # terminal
    OrderStatus.CANCELLED: set(),  # terminal
}

TERMINAL_STATUSES = frozenset(status for status, targets in _VALID_TRANSITIONS.items() if not targets)

# Statuses in which delivery tracking may be recorded
TRACKABLE_STATUSES = frozenset({OrderStatus.CONFIRMED, OrderStatus.PREPARING, OrderStatus.SHIPPED})


def parse_status(value) -> OrderStatus:
    """Resolve a status name; unknown names are invalid transitions."""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).strip().lower())
    except ValueError:
        raise InvalidTransition(f"Unknown order status {value!r}") from None


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in _VALID_TRANSITIONS[current]


def order_total(items) -> float:
    return round(sum(item["quantity"] * item["unit_price"] for item in items), 2)


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class DeliveryAddress:
    """Where a delivery order goes, captured at checkout."""

    street = String(max_length=255)
    city = String(max_length=100)
    region = String(max_length=100)
    country = String(max_length=100)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    position = Integer(default=0)

    @property
    def line_total(self) -> float:
        return round(self.quantity * self.unit_price, 2)


@ordering.entity(part_of="Order")
class StatusChange:
    """One entry of the append-only status history."""

    status = String(required=True, choices=OrderStatus)
    actor_id = Identifier(required=True)
    note = String(max_length=500)
    sequence = Integer(required=True, min_value=1)
    changed_at = DateTime(required=True)


@ordering.entity(part_of="Order")
class TrackingEvent:
    """A delivery tracking entry recorded by the farm."""

    location = String(max_length=200)
    description = String(max_length=500)
    status_label = String(max_length=100)
    latitude = Float(min_value=-90.0, max_value=90.0)
    longitude = Float(min_value=-180.0, max_value=180.0)
    estimated_arrival = DateTime()
    actor_id = Identifier(required=True)
    sequence = Integer(required=True, min_value=1)
    recorded_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    buyer_id = Identifier(required=True)
    farm_id = Identifier(required=True)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    items = HasMany(OrderItem)
    status_history = HasMany(StatusChange)
    tracking_events = HasMany(TrackingEvent)
    total_amount = Float(default=0.0)
    currency = String(max_length=3, default="XOF")
    delivery_method = String(choices=DeliveryMethod, default=DeliveryMethod.PICKUP.value)
    delivery_address = ValueObject(DeliveryAddress)
    notes = Text()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def status_must_match_latest_history_entry(self):
        if not self.status_history:
            return
        latest = max(self.status_history, key=lambda change: change.sequence)
        if latest.status != self.status:
            raise ValidationError({"status": [f"Status {self.status} does not match history ({latest.status})"]})

    @invariant.post
    def total_must_equal_sum_of_items(self):
        if not self.items:
            return
        expected = round(sum(item.quantity * item.unit_price for item in self.items), 2)
        if abs(expected - (self.total_amount or 0.0)) > 0.005:
            raise ValidationError({"total_amount": [f"Total {self.total_amount} does not match items ({expected})"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        buyer_id: str,
        farm_id: str,
        items_data: list[dict],
        delivery_method: str = DeliveryMethod.PICKUP.value,
        delivery_address: dict | None = None,
        notes: str | None = None,
        currency: str = "XOF",
    ) -> "Order":
        """Create a pending order.

        Args:
            items_data: List of dicts with product_id, quantity, unit_price.
                The prices are the ones the buyer saw; they never change.
        """
        if not items_data:
            raise EmptyOrder("An order needs at least one item")
        for item in items_data:
            validate_quantity(item["quantity"])
        delivery_method = delivery_method or DeliveryMethod.PICKUP.value
        if delivery_method == DeliveryMethod.DELIVERY.value and not (delivery_address or {}).get("city"):
            raise InvalidRequest("Delivery orders need an address with a city")

        now = datetime.now(UTC)
        total = order_total(items_data)

        order = cls(
            buyer_id=str(buyer_id),
            farm_id=str(farm_id),
            status=OrderStatus.PENDING.value,
            total_amount=total,
            currency=currency,
            delivery_method=delivery_method,
            delivery_address=DeliveryAddress(**delivery_address) if delivery_address else None,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        with atomic_change(order):
            for position, item in enumerate(items_data):
                order.add_items(
                    OrderItem(
                        product_id=str(item["product_id"]),
                        quantity=item["quantity"],
                        unit_price=float(item["unit_price"]),
                        position=position,
                    )
                )
            order.add_status_history(
                StatusChange(
                    status=OrderStatus.PENDING.value,
                    actor_id=str(buyer_id),
                    note="Order created",
                    sequence=1,
                    changed_at=now,
                )
            )

        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                buyer_id=str(buyer_id),
                farm_id=str(farm_id),
                items=json.dumps(
                    [
                        {
                            "product_id": str(item["product_id"]),
                            "quantity": item["quantity"],
                            "unit_price": float(item["unit_price"]),
                        }
                        for item in items_data
                    ]
                ),
                total_amount=total,
                currency=currency,
                delivery_method=order.delivery_method,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.current_status in TERMINAL_STATUSES

    @property
    def ordered_items(self) -> list:
        return sorted(self.items or [], key=lambda item: item.position or 0)

    @property
    def history(self) -> list:
        return sorted(self.status_history or [], key=lambda change: change.sequence)

    @property
    def tracking(self) -> list:
        return sorted(self.tracking_events or [], key=lambda event: event.sequence)

    def reached_at(self, status: OrderStatus) -> datetime | None:
        """When the order first entered ``status``, if it ever did."""
        return next((as_utc(change.changed_at) for change in self.history if change.status == status.value), None)

    def _next_timestamp(self, previous: datetime | None) -> datetime:
        now = datetime.now(UTC)
        previous = as_utc_or_none(previous)
        if previous is not None and now <= previous:
            now = previous + timedelta(microseconds=1)
        return now

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = self.current_status
        if current in TERMINAL_STATUSES:
            raise TerminalState(f"Order is {current.value}; no further transitions are allowed")
        if not can_transition(current, target_status):
            raise InvalidTransition(f"Cannot transition from {current.value} to {target_status.value}")

    def transition_to(self, target_status, actor_id: str, note: str | None = None) -> OrderStatusChanged:
        """Move the order to ``target_status`` and append it to the history."""
        target_status = parse_status(target_status)
        self._assert_can_transition(target_status)

        previous = self.current_status
        history = self.history
        changed_at = self._next_timestamp(history[-1].changed_at if history else None)
        sequence = (history[-1].sequence if history else 0) + 1

        with atomic_change(self):
            self.status = target_status.value
            self.add_status_history(
                StatusChange(
                    status=target_status.value,
                    actor_id=str(actor_id),
                    note=note,
                    sequence=sequence,
                    changed_at=changed_at,
                )
            )
            self.updated_at = changed_at

        event = OrderStatusChanged(
            order_id=str(self.id),
            buyer_id=str(self.buyer_id),
            farm_id=str(self.farm_id),
            previous_status=previous.value,
            new_status=target_status.value,
            changed_by=str(actor_id),
            note=note,
            sequence=sequence,
            changed_at=changed_at,
        )
        self.raise_(event)
        return event

    # -------------------------------------------------------------------
    # Delivery tracking
    # -------------------------------------------------------------------
    def add_tracking_event(
        self,
        actor_id: str,
        location: str | None = None,
        description: str | None = None,
        status_label: str | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
        estimated_arrival: datetime | None = None,
    ) -> TrackingAdded:
        """Append a tracking entry; only while the order is on its way."""
        if self.current_status not in TRACKABLE_STATUSES:
            raise InvalidState(f"Tracking cannot be added while the order is {self.status}")
        if not location and not description:
            raise InvalidRequest("A tracking event needs a location or a description")
        if (latitude is None) != (longitude is None):
            raise InvalidRequest("Both latitude and longitude are required when either is given")

        events = self.tracking
        recorded_at = self._next_timestamp(events[-1].recorded_at if events else None)
        sequence = (events[-1].sequence if events else 0) + 1

        self.add_tracking_events(
            TrackingEvent(
                location=location,
                description=description,
                status_label=status_label,
                latitude=latitude,
                longitude=longitude,
                estimated_arrival=estimated_arrival,
                actor_id=str(actor_id),
                sequence=sequence,
                recorded_at=recorded_at,
            )
        )
        self.updated_at = recorded_at

        event = TrackingAdded(
            order_id=str(self.id),
            buyer_id=str(self.buyer_id),
            location=location,
            description=description,
            status_label=status_label,
            latitude=latitude,
            longitude=longitude,
            estimated_arrival=estimated_arrival,
            recorded_by=str(actor_id),
            sequence=sequence,
            recorded_at=recorded_at,
        )
        self.raise_(event)
        return event
