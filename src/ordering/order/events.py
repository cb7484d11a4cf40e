"""Domain events for the Order aggregate.

Events are raised by the aggregate when it changes and handed to the
notification relay once the change is persisted.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderCreated:
    """A buyer checked out and a pending order was created for one farm."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    farm_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, quantity, unit_price}
    total_amount = Float(required=True)
    currency = String(default="XOF")
    delivery_method = String()
    created_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """An order moved to a new status."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    farm_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_by = Identifier(required=True)
    note = String()
    sequence = Integer(required=True)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class TrackingAdded:
    """A delivery tracking event was appended to an order."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    location = String()
    description = String()
    status_label = String()
    latitude = Float()
    longitude = Float()
    estimated_arrival = DateTime()
    recorded_by = Identifier(required=True)
    sequence = Integer(required=True)
    recorded_at = DateTime(required=True)
